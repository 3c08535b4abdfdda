"""framefit: adaptive image analysis and rendering-policy engine."""

__version__ = "0.1.0"
