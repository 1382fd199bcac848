"""Built-in rich value types: vectors and colors."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .rich import RichValueRegistry


@dataclass(frozen=True)
class Vector:
    """Three-dimensional vector."""

    x: float
    y: float
    z: float

    def __post_init__(self):
        for axis in ("x", "y", "z"):
            object.__setattr__(self, axis, float(getattr(self, axis)))


@dataclass(frozen=True)
class Color:
    """RGB color with 8-bit channels."""

    red: int
    green: int
    blue: int

    def __post_init__(self):
        for channel in ("red", "green", "blue"):
            value = getattr(self, channel)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
                raise ValueError(f"Color channel {channel} must be an integer in 0-255, got {value!r}")

    @classmethod
    def from_rgb(cls, rgb: int) -> "Color":
        """Build a color from a packed 0xRRGGBB integer."""
        if not 0 <= rgb <= 0xFFFFFF:
            raise ValueError(f"RGB value out of range: {rgb:#x}")
        return cls((rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF)

    def as_rgb(self) -> int:
        """Return the color packed as 0xRRGGBB."""
        return (self.red << 16) | (self.green << 8) | self.blue


class VectorCodec:
    type_tag = "Vector"
    value_type = Vector

    def serialize(self, value: Vector) -> dict[str, Any]:
        return {"x": value.x, "y": value.y, "z": value.z}

    def deserialize(self, data: Mapping[str, Any]) -> Vector:
        return Vector(data["x"], data["y"], data["z"])


class ColorCodec:
    type_tag = "Color"
    value_type = Color

    def serialize(self, value: Color) -> dict[str, Any]:
        return {"red": value.red, "green": value.green, "blue": value.blue}

    def deserialize(self, data: Mapping[str, Any]) -> Color:
        return Color(data["red"], data["green"], data["blue"])


def default_registry() -> RichValueRegistry:
    """Create a registry holding the built-in vector and color codecs."""
    return RichValueRegistry([VectorCodec(), ColorCodec()])
