"""Geometry primitives for framefit.

Example:
    from framefit.geometry import Size

    size = Size(width=1920, height=1080)
    size.aspect_ratio  # 1.777...
"""

from framefit.geometry.primitives import Size

__all__ = ["Size"]
