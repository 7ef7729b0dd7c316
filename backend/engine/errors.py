"""Error types raised by the equipment engine.

Only two conditions are exceptional: a request that fails validation and a
catalog record that violates its invariants.  "Nothing matched" and
"components are incompatible" are ordinary results, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass


class EngineError(Exception):
    """Base class for engine failures."""


@dataclass
class FieldError:
    field: str        # dotted path, e.g. "installation.roof_pitch"
    message: str
    category: str     # requirements | installation | preferences | constraints | existing_system

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "category": self.category}


class RecommendationValidationError(EngineError):
    """One or more request fields are missing or out of range."""

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Invalid request data: {summary}")

    @property
    def category(self) -> str:
        return self.errors[0].category if self.errors else "requirements"


class CatalogRecordError(EngineError):
    """A catalog record could not be turned into a valid equipment item."""

    def __init__(self, category: str, record_id: str | None, message: str):
        self.category = category
        self.record_id = record_id
        super().__init__(f"Invalid {category} record {record_id or '<unknown>'}: {message}")
