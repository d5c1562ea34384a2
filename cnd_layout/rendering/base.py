"""Base renderer protocol.

The engine never draws. A renderer receives the finished LayoutResult,
runs (or delegates to) the constraint solver, and paints the diagram.
"""

from abc import ABC, abstractmethod

from cnd_layout.models.layout_result import LayoutResult


class LayoutRenderer(ABC):
    """Abstract base class for layout renderers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Renderer name (e.g., 'svg', 'webcola')."""
        ...

    @abstractmethod
    def render_layout(self, layout: LayoutResult) -> None:
        """Display ``layout``, replacing whatever was shown before."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove the current diagram."""
        ...
