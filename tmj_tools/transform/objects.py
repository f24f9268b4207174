"""
Quarter-turn rotation of map objects

=============================================================================
PIXEL SPACE
=============================================================================

Objects live in continuous pixel coordinates. The whole map, of size
width_px x height_px before the turn, is rotated; a point moves like this:

    CLOCKWISE:          (x, y) -> (height_px - y, x)
    COUNTER-CLOCKWISE:  (x, y) -> (y, width_px - x)

Each object shape then needs its own bookkeeping:

    POINT               the position itself is rotated
    POLYGON / POLYLINE  every vertex is rotated in world space, the anchor
                        becomes the minimum corner of the rotated vertices
                        and vertices are stored relative to it again
    RECTANGLE / ELLIPSE the four corners are rotated; their bounding box
                        gives the new top-left corner and swapped size
    TILE                like a rectangle, but Tiled anchors tile objects
                        at the BOTTOM-left corner:

                            before:  top-left = (x, y - height)
                            after:   anchor   = (min_x, min_y + new_height)

With integer inputs all of this is exact integer arithmetic, so a clockwise
turn followed by a counter-clockwise one restores every coordinate.

=============================================================================
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from tmj_manager import MapObject, ObjectShape, Property
from ..config import DEFAULTS
from .direction import Direction

logger = logging.getLogger(__name__)

AliasPairs = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class RotationFrame:
    """Pixel extent of the map before the turn, plus the direction."""
    width_px: float
    height_px: float
    direction: Direction

    def rotate_point(self, x: float, y: float) -> Tuple[float, float]:
        if self.direction is Direction.CLOCKWISE:
            return self.height_px - y, x
        return y, self.width_px - x


def finite_or_zero(value: Any, field_name: str = "", obj_id: Any = None) -> float:
    """Numbers pass through; NaN, infinities, None and non-numbers become 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return value
    logger.debug("%s: coercing malformed %s=%r to 0", obj_id, field_name, value)
    return 0


def normalize_rotation(degrees: float) -> float:
    """Map any angle into [0, 360)."""
    result = degrees % 360
    # Tiny negative floats can round up to exactly 360
    if result >= 360:
        result -= 360
    return result


def _has_value(prop: Property) -> bool:
    return prop is not None and bool(prop.value)


def reconcile_aliases(properties: Dict[str, Property],
                      aliases: AliasPairs = DEFAULTS.property_aliases) -> List[str]:
    """
    Keep aliased property names in sync.

    For each (a, b) pair, when only one of the two carries a value the other
    one gets a copy. Returns the names that were written.
    """
    written = []
    for first, second in aliases:
        first_prop = properties.get(first)
        second_prop = properties.get(second)
        if _has_value(first_prop) and not _has_value(second_prop):
            source, target = first_prop, second
        elif _has_value(second_prop) and not _has_value(first_prop):
            source, target = second_prop, first
        else:
            continue

        existing = properties.get(target)
        if existing is not None:
            existing.value = source.value
        else:
            properties[target] = Property(name=target, type=source.type, value=source.value)
        written.append(target)
    return written


def _rotate_box(obj: MapObject, frame: RotationFrame, bottom_anchor: bool):
    x, y, width, height = obj.x, obj.y, obj.width, obj.height
    top = y - height if bottom_anchor else y

    corners = [
        frame.rotate_point(x, top),
        frame.rotate_point(x + width, top),
        frame.rotate_point(x, top + height),
        frame.rotate_point(x + width, top + height),
    ]
    xs = [cx for cx, _ in corners]
    ys = [cy for _, cy in corners]
    min_x, min_y = min(xs), min(ys)

    obj.width = max(xs) - min_x
    obj.height = max(ys) - min_y
    obj.x = min_x
    obj.y = min_y + obj.height if bottom_anchor else min_y


def _rotate_vertices(obj: MapObject, frame: RotationFrame):
    if not obj.points:
        obj.x, obj.y = frame.rotate_point(obj.x, obj.y)
        obj.width, obj.height = obj.height, obj.width
        return

    world = [
        frame.rotate_point(obj.x + finite_or_zero(px, "point.x", obj.id),
                           obj.y + finite_or_zero(py, "point.y", obj.id))
        for px, py in obj.points
    ]
    min_x = min(wx for wx, _ in world)
    min_y = min(wy for _, wy in world)

    obj.x, obj.y = min_x, min_y
    obj.points = [(wx - min_x, wy - min_y) for wx, wy in world]
    obj.width, obj.height = obj.height, obj.width


def rotate_object(obj: MapObject, frame: RotationFrame,
                  aliases: AliasPairs = DEFAULTS.property_aliases):
    """Rotate one object in place and reconcile its aliased properties."""
    obj.x = finite_or_zero(obj.x, "x", obj.id)
    obj.y = finite_or_zero(obj.y, "y", obj.id)
    obj.width = finite_or_zero(obj.width, "width", obj.id)
    obj.height = finite_or_zero(obj.height, "height", obj.id)

    if obj.shape is ObjectShape.POINT:
        obj.x, obj.y = frame.rotate_point(obj.x, obj.y)
    elif obj.shape in (ObjectShape.POLYGON, ObjectShape.POLYLINE):
        _rotate_vertices(obj, frame)
    elif obj.shape is ObjectShape.TILE:
        _rotate_box(obj, frame, bottom_anchor=True)
    else:
        _rotate_box(obj, frame, bottom_anchor=False)

    rotation = finite_or_zero(obj.rotation, "rotation", obj.id)
    obj.rotation = normalize_rotation(rotation + frame.direction.delta)

    reconcile_aliases(obj.properties, aliases)
