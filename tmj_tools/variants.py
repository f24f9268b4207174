"""
Deterministic floor tile variants

=============================================================================
WHAT IT DOES
=============================================================================

Large floors painted with a single tile look flat. This pass picks the most
frequent tile of each floor layer (the "modal" tile) and replaces every cell
holding it with one of the first `variant_count` tiles of the tileset:

    new_gid = flip_bits(old_gid) | (firstgid + hash(x, y) % variant_count)

Flip flags are preserved, empty cells (GID 0) and every other tile are left
alone.

=============================================================================
SPATIAL HASH
=============================================================================

    hash(x, y) = |int32(x * 73856093) xor int32(y * 19349663)|

No seed, no random state: the same cell always gets the same variant, so
regenerating a map produces a byte-identical file and clean diffs. Products
are wrapped to signed 32 bits before the xor, matching the numbers produced
by the JavaScript tooling earlier maps were generated with.

hash(0, 0) == 0, so the origin always receives `firstgid + 0`.

=============================================================================
"""

import array
import logging
from typing import Callable, Optional, Sequence

import numpy as np

from tmj_manager import TiledMap, TileLayer, Tileset
from .config import DEFAULTS
from .errors import LayerSizeMismatch, MissingTileset, UnsupportedMapKind
from .gid import FLIP_MASK

logger = logging.getLogger(__name__)

HASH_X = 73856093
HASH_Y = 19349663

_BASE_MASK = np.uint32(~FLIP_MASK & 0xFFFFFFFF)


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def spatial_hash(x: int, y: int) -> int:
    """Hash of one tile coordinate (non-negative)."""
    return abs(_int32(x * HASH_X) ^ _int32(y * HASH_Y))


def _int32_array(values: np.ndarray) -> np.ndarray:
    wrapped = values & 0xFFFFFFFF
    return np.where(wrapped >= 0x80000000, wrapped - 0x100000000, wrapped)


def spatial_hash_array(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Vectorised spatial_hash over matching coordinate arrays (int64 result)."""
    xs = np.asarray(xs, dtype=np.int64)
    ys = np.asarray(ys, dtype=np.int64)
    return np.abs(_int32_array(xs * HASH_X) ^ _int32_array(ys * HASH_Y))


def is_floor_layer(name: str, keywords: Sequence[str] = DEFAULTS.floor_keywords) -> bool:
    """Case-insensitive keyword match on a layer name."""
    lowered = str(name or "").lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def select_variant_tileset(document: TiledMap, tileset_name: Optional[str] = None) -> Tileset:
    """
    The tileset whose first tiles are the variants.

    Defaults to the first tileset of the map.
    """
    if tileset_name is not None:
        tileset = document.get_tileset_by_name(tileset_name)
        if tileset is None:
            raise MissingTileset(f"Map has no tileset named \"{tileset_name}\"")
    elif document.tilesets:
        tileset = document.tilesets[0]
    else:
        raise MissingTileset("Map has no tileset")

    if tileset.firstgid is None:
        raise MissingTileset(f"Tileset \"{tileset.name}\" has no firstgid")
    if tileset.firstgid <= 0 or tileset.firstgid > int(_BASE_MASK):
        raise MissingTileset(f"Tileset \"{tileset.name}\" has an invalid firstgid {tileset.firstgid}")
    return tileset


def find_modal_id(base_ids: np.ndarray) -> Optional[int]:
    """
    Most frequent non-zero id. Ties go to the id seen first in scan order.
    """
    nonzero = base_ids[base_ids != 0]
    if nonzero.size == 0:
        return None
    ids, first_index, counts = np.unique(nonzero, return_index=True, return_counts=True)
    # Highest count first, then earliest first occurrence
    best = np.lexsort((first_index, -counts))[0]
    return int(ids[best])


def assign_layer_variants(layer: TileLayer, firstgid: int, variant_count: int,
                          map_width: int = 0, map_height: int = 0) -> int:
    """
    Replace the layer's modal tile with hashed variants. Returns changed cells.

    Layers saved without a size (width/height missing or 0) use the map's.
    """
    if layer.data is None or len(layer.data) == 0:
        return 0
    width = layer.width or map_width
    height = layer.height or map_height
    if width <= 0 or len(layer.data) != width * height:
        raise LayerSizeMismatch(
            f"Tile layer \"{layer.name}\" has {len(layer.data)} cells, "
            f"expected {width}x{height}"
        )

    gids = np.array(layer.data, dtype=np.uint32)
    bases = gids & _BASE_MASK

    modal = find_modal_id(bases)
    if modal is None:
        return 0

    mask = bases == modal
    indices = np.flatnonzero(mask)
    xs = indices % width
    ys = indices // width

    variants = spatial_hash_array(xs, ys) % variant_count
    flags = (gids[mask] & np.uint32(FLIP_MASK)).astype(np.int64)
    gids[mask] = (flags | (firstgid + variants)).astype(np.uint32)

    layer.data = array.array('I', gids.tolist())
    return int(indices.size)


def assign_variants(document: TiledMap,
                    layer_predicate: Callable[[str], bool] = is_floor_layer,
                    variant_count: int = DEFAULTS.variant_count,
                    tileset_name: Optional[str] = None) -> int:
    """
    Assign floor variants in place on every selected tile layer.

    Returns the number of cells changed.

    Raises:
    -------
    ValueError : variant_count is not a positive integer
    UnsupportedMapKind : the map is infinite
    MissingTileset : no tileset, or it has no firstgid
    """
    if isinstance(variant_count, bool) or not isinstance(variant_count, int) or variant_count <= 0:
        raise ValueError(f"variant_count must be a positive integer, got {variant_count!r}")
    if document.infinite:
        raise UnsupportedMapKind("Map is infinite (unsupported)")

    tileset = select_variant_tileset(document, tileset_name)

    total = 0
    for layer in document.iter_tile_layers():
        if not layer_predicate(layer.name):
            continue
        changed = assign_layer_variants(layer, tileset.firstgid, variant_count,
                                        document.width, document.height)
        logger.debug("Layer \"%s\": %d cells changed", layer.name, changed)
        total += changed
    return total
