"""
Whole-map quarter turns

=============================================================================
PIPELINE
=============================================================================

    1. Reject infinite maps (UnsupportedMapKind) and maps without layers
       (MissingLayerData) - before anything is copied or changed
    2. Deep-copy the document; the caller's map is never modified
    3. Per quarter turn:
       - remember the pixel size of the map before the turn
       - swap the map's width and height
       - rotate every top-level layer (groups recurse)

=============================================================================
COMPOSITION
=============================================================================

    rotate_map(rotate_map(m, CW), CCW)          == m
    rotate_map(m, CW, turns=4)                  == m
    rotate_map(m, CW, turns=2)                  == rotate_map(m, CCW, turns=2)

These hold exactly for integer coordinates. Polygon anchors are re-derived
from their vertices, so a polygon whose vertices do not start at its anchor
comes back normalised (same world position, anchor moved to the minimum
corner).

=============================================================================
"""

import copy
import logging
from typing import Union

from tmj_manager import TiledMap
from .config import DEFAULTS
from .errors import MissingLayerData, UnsupportedMapKind
from .transform.direction import Direction
from .transform.layers import RotationContext, rotate_layer
from .transform.objects import AliasPairs, RotationFrame

logger = logging.getLogger(__name__)


def validate_rotatable(document: TiledMap):
    """Raise if the document cannot be rotated at all."""
    if document.infinite:
        raise UnsupportedMapKind("Map is infinite (unsupported)")
    if not document.layers:
        raise MissingLayerData("Map has no layers")


def _rotate_once(document: TiledMap, direction: Direction, aliases: AliasPairs):
    frame = RotationFrame(document.pixel_width, document.pixel_height, direction)
    context = RotationContext(document.width, document.height, frame, aliases)

    document.width, document.height = document.height, document.width

    for layer in document.layers:
        rotate_layer(layer, context)


def rotate_map(document: TiledMap,
               direction: Union[Direction, str] = Direction.CLOCKWISE,
               turns: int = 1,
               aliases: AliasPairs = DEFAULTS.property_aliases) -> TiledMap:
    """
    Return a copy of `document` turned by `turns` quarter turns.

    Raises:
    -------
    UnsupportedMapKind : infinite map, chunked or encoded tile layer
    MissingLayerData : no layers, or a tile layer without data
    """
    direction = Direction.parse(direction)
    validate_rotatable(document)

    if document.tilewidth != document.tileheight:
        logger.warning(
            "Tiles are not square (%sx%s); object positions will not line up "
            "with the rotated grid", document.tilewidth, document.tileheight
        )

    result = copy.deepcopy(document)
    for _ in range(turns % 4):
        _rotate_once(result, direction, aliases)
    return result


def rotate_cw(document: TiledMap, **kwargs) -> TiledMap:
    return rotate_map(document, Direction.CLOCKWISE, **kwargs)


def rotate_ccw(document: TiledMap, **kwargs) -> TiledMap:
    return rotate_map(document, Direction.COUNTERCLOCKWISE, **kwargs)
