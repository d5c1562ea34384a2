"""Layout generation: spec + instance -> nodes, edges, groups and constraints."""

from cnd_layout.layout.colors import ColorPicker, type_colors
from cnd_layout.layout.cyclic import cyclic_disjunctions
from cnd_layout.layout.errors import LayoutEntryError
from cnd_layout.layout.generator import LayoutGenerator, generate_layout
from cnd_layout.layout.orientation import ConstraintBuilder, is_alignment_edge

__all__ = [
    "ColorPicker",
    "ConstraintBuilder",
    "LayoutEntryError",
    "LayoutGenerator",
    "cyclic_disjunctions",
    "generate_layout",
    "is_alignment_edge",
    "type_colors",
]
