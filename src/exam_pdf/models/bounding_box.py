"""Bounding box schema for detected diagrams."""

import math
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import InvalidBoundingBox

BOX_FIELDS = ("x", "y", "width", "height")
CORNER_FIELDS = ("x1", "y1", "x2", "y2")


def _check_number(value: Any) -> Any:
    # bool is an int subclass and numeric strings would be coerced by pydantic
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value}")
    return value


class BoundingBox(BaseModel):
    """Diagram rectangle in the coordinate space of the detection step."""

    x: float = Field(description="Left edge, in reference units.")
    y: float = Field(description="Top edge, in reference units.")
    width: float
    height: float
    page_width: Optional[float] = Field(
        default=None,
        description="""Width of the page as the detection step saw it.

        Coordinates are relative to page_width x page_height, which is not
        necessarily the size of the rasterized image they are applied to.
        """,
    )
    page_height: Optional[float] = None

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def _numeric(cls, value: Any) -> Any:
        return _check_number(value)

    @field_validator("page_width", "page_height", mode="before")
    @classmethod
    def _optional_numeric(cls, value: Any) -> Any:
        if value is None:
            return None
        return _check_number(value)

    @classmethod
    def from_mapping(
        cls,
        data: Optional[Mapping[str, Any]],
        page_width: Optional[float] = None,
        page_height: Optional[float] = None,
    ) -> "BoundingBox":
        """Build from {x, y, width, height} or {x1, y1, x2, y2}.

        Reference dimensions inside ``data`` take precedence over the
        ``page_width``/``page_height`` arguments.
        """
        if data is None:
            raise InvalidBoundingBox("Bounding box is required")
        if not isinstance(data, Mapping):
            raise InvalidBoundingBox(
                f"Bounding box must be a mapping, got {type(data).__name__}"
            )

        fields = {}
        if all(key in data for key in BOX_FIELDS):
            fields = {key: data[key] for key in BOX_FIELDS}
        elif all(key in data for key in CORNER_FIELDS):
            try:
                x1, y1, x2, y2 = (_check_number(data[key]) for key in CORNER_FIELDS)
            except ValueError as e:
                raise InvalidBoundingBox(f"Invalid bounding box corners: {e}") from e
            fields = {"x": x1, "y": y1, "width": x2 - x1, "height": y2 - y1}
        else:
            missing = [key for key in BOX_FIELDS if key not in data]
            raise InvalidBoundingBox(
                f"Bounding box is missing field(s): {', '.join(missing)}"
            )

        own_width = data.get("page_width")
        own_height = data.get("page_height")
        fields["page_width"] = own_width if own_width is not None else page_width
        fields["page_height"] = own_height if own_height is not None else page_height

        try:
            return cls(**fields)
        except ValidationError as e:
            raise InvalidBoundingBox(f"Invalid bounding box: {e}") from e

    @classmethod
    def from_diagram(cls, diagram: Optional[Mapping[str, Any]]) -> "BoundingBox":
        """Build from a diagram payload with a nested ``bounding_box``."""
        if not diagram or not isinstance(diagram, Mapping):
            raise InvalidBoundingBox("Diagram payload is required")
        return cls.from_mapping(
            diagram.get("bounding_box"),
            page_width=diagram.get("page_width"),
            page_height=diagram.get("page_height"),
        )
