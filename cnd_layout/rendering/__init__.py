"""Renderer interface consumed by the pipeline."""

from cnd_layout.rendering.base import LayoutRenderer

__all__ = ["LayoutRenderer"]
