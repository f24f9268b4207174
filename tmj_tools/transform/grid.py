"""
Quarter-turn rotation of flat tile data

=============================================================================
INDEX MAPPING
=============================================================================

Tile data is row-major: cell (x, y) lives at data[y * width + x]. After a
quarter turn the grid is height x width:

    CLOCKWISE:          new_x = height - 1 - y      new_y = x
    COUNTER-CLOCKWISE:  new_x = y                   new_y = width - 1 - x

    destination index = new_y * new_width + new_x

Example, 3x2 grid rotated clockwise:

    1 2 3        4 1
    4 5 6   ->   5 2
                 6 3

=============================================================================
IMPLEMENTATION
=============================================================================

The data is viewed as a (height, width) NumPy array of uint32 and turned with
np.rot90. Using an unsigned 32-bit dtype keeps the flip flags in the top bits
of every GID intact; values are only moved, never recomputed.

=============================================================================
"""

import array
from typing import Sequence, Tuple, Union

import numpy as np

from ..errors import LayerSizeMismatch
from .direction import Direction

TileData = Union[array.array, Sequence[int]]


def rotate_tile_data(data: TileData, width: int, height: int,
                     direction: Union[Direction, str] = Direction.CLOCKWISE,
                     name: str = "") -> Tuple[array.array, int, int]:
    """
    Rotate a flat tile grid by 90 degrees.

    Parameters:
    -----------
    data : array.array or sequence of int
        Row-major GIDs, len(data) == width * height
    width, height : int
        Grid size in tiles before rotation
    direction : Direction or str
        Direction.CLOCKWISE / Direction.COUNTERCLOCKWISE (or "cw" / "ccw")
    name : str
        Layer name, only used in error messages

    Returns:
    --------
    (new_data, new_width, new_height) with new_width == height and
    new_height == width

    Raises:
    -------
    LayerSizeMismatch : data length is not width * height
    """
    direction = Direction.parse(direction)
    new_width, new_height = height, width

    if len(data) == 0:
        return array.array('I'), new_width, new_height

    if width <= 0 or height <= 0 or len(data) != width * height:
        raise LayerSizeMismatch(
            f"Tile layer \"{name}\" has {len(data)} cells, "
            f"expected {width}x{height}={width * height}"
        )

    grid = np.asarray(data, dtype=np.uint32).reshape(height, width)
    rotated = np.rot90(grid, k=direction.numpy_k)

    return array.array('I', rotated.ravel().tolist()), new_width, new_height
