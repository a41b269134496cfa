"""Render and synthesis options as an immutable value object."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from winglets.errors import InvalidConfiguration

# Options whose change invalidates contours and winglets.
REPROCESS_FIELDS = frozenset({"a", "b", "n", "contour_dropoff"})
# Options whose change only touches line widths.
WIDTH_FIELDS = frozenset({"line_width"})


class Options(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    show_winglets: bool = Field(default=True, alias="showWinglets")
    show_contours: bool = Field(default=False, alias="showContours")
    line_width: float = Field(default=1.0, ge=0.0, alias="lineWidth")
    a: float = Field(default=0.05, ge=0.0, description="Base winglet length")
    b: float = Field(default=0.05, ge=0.0, description="Length gained at silhouette value 1")
    n: float = Field(default=2.0, ge=0.0, description="Exponent applied to the silhouette value")
    contour_dropoff: float = Field(default=0.05, gt=0.0, le=1.0, alias="contourDropoff")

    def arc_length(self, value: float) -> float:
        return self.a + (value ** self.n) * self.b

    def merge(self, patch: Mapping[str, Any]) -> tuple["Options", set[str]]:
        """Apply a merge patch; returns the new options and the changed field names.

        Keys may use either the camelCase aliases or the field names.
        """
        data = self.model_dump()
        for key, value in patch.items():
            data[_field_name(key)] = value
        new = validate_options(data)
        changed = {name for name in type(self).model_fields if getattr(new, name) != getattr(self, name)}
        return new, changed


def _field_name(key: str) -> str:
    for name, field in Options.model_fields.items():
        if key == name or key == field.alias:
            return name
    raise InvalidConfiguration(f"Unknown option: {key!r}")


def validate_options(data: Mapping[str, Any] | None = None) -> Options:
    """Build Options from a mapping, re-raising pydantic errors as InvalidConfiguration."""
    try:
        return Options.model_validate(dict(data or {}))
    except ValidationError as e:
        raise InvalidConfiguration(str(e)) from e
