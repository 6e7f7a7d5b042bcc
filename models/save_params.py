"""Codec parameters for saving images."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SaveParams:
    """JPEG encoder parameters."""

    quality: int = 100
    progressive: bool = False
    optimize: bool = False

    def __post_init__(self):
        if not (1 <= self.quality <= 100):
            raise ValueError(f"Quality must be 1-100, got {self.quality}")
