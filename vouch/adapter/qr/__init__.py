"""QR rendering adapter."""

from .renderer import SvgQRRenderer

__all__ = ["SvgQRRenderer"]
