"""
Layer tree traversal for quarter turns.

Every layer of the (possibly nested) tree is rotated against the same
pre-rotation map size; groups simply pass that context down.
"""

import logging
from dataclasses import dataclass

from tmj_manager import (
    LayerNode, TileLayer, ObjectGroup, LayerGroup, ImageLayer
)
from ..config import DEFAULTS
from ..errors import MissingLayerData, UnsupportedMapKind
from .grid import rotate_tile_data
from .objects import AliasPairs, RotationFrame, finite_or_zero, rotate_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationContext:
    """Map size in tiles before the turn, and the matching pixel frame."""
    width: int
    height: int
    frame: RotationFrame
    aliases: AliasPairs = DEFAULTS.property_aliases

    @property
    def new_width(self) -> int:
        return self.height

    @property
    def new_height(self) -> int:
        return self.width


def rotate_layer(layer: LayerNode, context: RotationContext):
    """Rotate one layer (and, for groups, all of its descendants) in place."""
    if isinstance(layer, TileLayer):
        _rotate_tile_layer(layer, context)
        return

    if isinstance(layer, ObjectGroup):
        for obj in layer.objects:
            rotate_object(obj, context.frame, context.aliases)
    elif isinstance(layer, LayerGroup):
        for child in layer.layers:
            rotate_layer(child, context)
    elif isinstance(layer, ImageLayer):
        _rotate_image_offset(layer, context)
    else:
        raise TypeError(f"Not a map layer: {type(layer).__name__}")

    # Older Tiled versions write the map size on non-tile layers
    if layer.width is not None:
        layer.width = context.new_width
    if layer.height is not None:
        layer.height = context.new_height


def _rotate_tile_layer(layer: TileLayer, context: RotationContext):
    if layer.is_chunked:
        raise UnsupportedMapKind(
            f"Tile layer \"{layer.name}\" is chunked (infinite maps are not supported)"
        )
    if layer.is_encoded:
        raise UnsupportedMapKind(
            f"Tile layer \"{layer.name}\" uses {layer.encoding or 'encoded'} data; "
            "save the map with CSV layer format"
        )
    if layer.data is None:
        raise MissingLayerData(f"Tile layer \"{layer.name}\" is missing data")

    layer.data, layer.width, layer.height = rotate_tile_data(
        layer.data, context.width, context.height,
        context.frame.direction, name=layer.name
    )
    logger.debug("Rotated tile layer \"%s\" to %dx%d", layer.name, layer.width, layer.height)


def _rotate_image_offset(layer: ImageLayer, context: RotationContext):
    if layer.offsetx is None and layer.offsety is None:
        return
    layer.offsetx, layer.offsety = context.frame.rotate_point(
        finite_or_zero(layer.offsetx, "offsetx", layer.name),
        finite_or_zero(layer.offsety, "offsety", layer.name)
    )
