from pydantic_settings import BaseSettings

from engine.advisor.parameters import RecommendationParameters


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "case_sensitive": False}

    # App
    environment: str = "development"
    debug: bool = True
    app_name: str = "SolarMatch"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    log_json: bool = False

    # Catalog (empty = bundled reference catalog)
    catalog_path: str = ""

    # Search
    search_default_page_size: int = 20
    search_max_page_size: int = 100

    # Rate limits (requests per minute per client)
    search_rate_limit: int = 120
    recommendation_rate_limit: int = 30

    # Recommendation engine
    annual_yield_kwh_per_kw: float = 1_350.0
    installation_markup: float = 0.30
    inverter_sizing_min: float = 0.8
    inverter_sizing_max: float = 1.2
    alternative_tolerance: float = 0.10
    alternative_efficiency_floor: float = 0.95
    spacing_factor: float = 1.4
    electricity_rate: float = 0.15
    recommendation_validity_days: int = 7

    def recommendation_parameters(self) -> RecommendationParameters:
        return RecommendationParameters(
            annual_yield_kwh_per_kw=self.annual_yield_kwh_per_kw,
            installation_markup=self.installation_markup,
            sizing_band=(self.inverter_sizing_min, self.inverter_sizing_max),
            alternative_tolerance=self.alternative_tolerance,
            alternative_efficiency_floor=self.alternative_efficiency_floor,
            spacing_factor=self.spacing_factor,
            electricity_rate=self.electricity_rate,
            validity_days=self.recommendation_validity_days,
        )


settings = Settings()
