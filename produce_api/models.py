from __future__ import annotations

# produce_api/models.py
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


class ProduceType(str, Enum):
    FRUIT = "fruit"
    VEGETABLE = "vegetable"


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Produce(_Wire):
    id: int
    name: str
    type: ProduceType
    price_per_kg: float = Field(alias="pricePerKg")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProduceCreate(_Wire):
    name: StrictStr = Field(min_length=1)
    type: ProduceType
    # strict: ints are accepted, bools and numeric strings are not; inf/nan cannot be serialized back
    price_per_kg: float = Field(alias="pricePerKg", ge=0, strict=True, allow_inf_nan=False)


class ProducePatch(_Wire):
    """Partial update. Unset fields are left untouched by the repository."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[StrictStr] = Field(default=None, min_length=1)
    type: Optional[ProduceType] = None
    price_per_kg: Optional[float] = Field(default=None, alias="pricePerKg", ge=0, strict=True, allow_inf_nan=False)

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually sent, keyed by attribute name."""
        return {k: getattr(self, k) for k in self.model_fields_set}


def _describe(err: PydanticValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(x) for x in e.get("loc", ())) or "body"
        parts.append(f"{loc}: {e.get('msg')}")
    return "; ".join(parts)


def parse_create(body: Any) -> ProduceCreate:
    if not isinstance(body, dict):
        raise ValidationError("body must be a JSON object")
    missing = [k for k in ("name", "type", "pricePerKg") if body.get(k) is None]
    if missing:
        raise ValidationError(f"missing fields: {', '.join(missing)}")
    try:
        return ProduceCreate.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def parse_patch(body: Any) -> ProducePatch:
    if body is None:
        return ProducePatch()
    if not isinstance(body, dict):
        raise ValidationError("body must be a JSON object")
    # An explicit null means "not supplied", same as an absent key
    present = {k: v for k, v in body.items() if v is not None}
    try:
        return ProducePatch.model_validate(present)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e
