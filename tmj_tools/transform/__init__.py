"""Quarter-turn geometry: tile grids, objects and the layer tree"""

from .direction import Direction
from .grid import rotate_tile_data
from .objects import (
    RotationFrame, rotate_object, reconcile_aliases, normalize_rotation, finite_or_zero
)
from .layers import RotationContext, rotate_layer

__all__ = [
    "Direction",
    "rotate_tile_data",
    "RotationFrame",
    "rotate_object",
    "reconcile_aliases",
    "normalize_rotation",
    "finite_or_zero",
    "RotationContext",
    "rotate_layer",
]
