"""Geometry primitives for framefit.

Immutable Pydantic models for intrinsic image dimensions. Dimensions are
always strictly positive; degenerate sizes are rejected at construction so
they can never reach the classifier.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Size(BaseModel, frozen=True):
    """A 2D size representing width and height in pixels.

    Both dimensions must be strictly positive (> 0).

    Attributes:
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    @property
    def area(self) -> int:
        """Total pixel count."""
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width/height aspect ratio."""
        return self.width / self.height
