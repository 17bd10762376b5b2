from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class TransformKind(str, Enum):
    ROTATE_RIGHT = "rotate_right"
    ROTATE_LEFT = "rotate_left"
    FLIP = "flip"
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    GRAYSCALE = "grayscale"
    VINTAGE = "vintage"
    SATURATION = "saturation"
    BLUR = "blur"
    PIXELATE = "pixelate"

    @property
    def takes_amount(self) -> bool:
        return self in _PARAMETERISED


_PARAMETERISED = {
    TransformKind.BRIGHTNESS,
    TransformKind.CONTRAST,
    TransformKind.SATURATION,
    TransformKind.BLUR,
    TransformKind.PIXELATE,
}


@dataclass(frozen=True)
class TransformRequest:
    """
    Value-object naming one transform and its integer amount.
    The amount is a percentage for brightness/contrast/saturation,
    a radius for blur and a block size for pixelate; other kinds ignore it.
    """
    kind: TransformKind
    amount: int = 0

    @classmethod
    def parse(cls, kind: str, amount: int | None = None) -> TransformRequest:
        """Build a request from user-facing strings, e.g. ("blur", 3)."""
        resolved = TransformKind(kind.replace("-", "_"))
        if resolved.takes_amount and amount is None:
            raise ValueError(f"Transform '{resolved.value}' needs an amount")
        return cls(resolved, int(amount or 0))

    @property
    def label(self) -> str:
        if self.kind.takes_amount:
            return f"{self.kind.value}{self.amount:+d}" if self._is_percentage else f"{self.kind.value}{self.amount}"
        return self.kind.value

    @property
    def _is_percentage(self) -> bool:
        return self.kind in (TransformKind.BRIGHTNESS, TransformKind.CONTRAST, TransformKind.SATURATION)
