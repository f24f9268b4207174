"""
Tiled JSON map tools - quarter-turn rotation and floor tile variants

Modules that work on documents import the model from tmj_manager; this
package root only exposes the pieces the model itself depends on.

Requisitos:
    pip install numpy orjson
"""

from .errors import (
    MapToolsError, UnsupportedMapKind, MissingLayerData, MalformedMap,
    LayerSizeMismatch, MissingTileset, MapFileError
)
from .gid import FLIP_MASK, base_id, flip_bits, with_flip_bits

__version__ = "1.0.0"
__all__ = [
    "MapToolsError",
    "UnsupportedMapKind",
    "MissingLayerData",
    "MalformedMap",
    "LayerSizeMismatch",
    "MissingTileset",
    "MapFileError",
    "FLIP_MASK",
    "base_id",
    "flip_bits",
    "with_flip_bits",
]
