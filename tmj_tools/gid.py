"""
Global tile ID (GID) bit helpers.

A GID is an unsigned 32-bit value. The three high bits store how the tile
artwork is mirrored, the remaining 29 bits are the tile reference:

    bit 31  horizontal flip
    bit 30  vertical flip
    bit 29  diagonal flip (anti-diagonal, used for 90 degree rotations)

    0b HVD 0 0000 0000 0000 0000 0000 0000 0101
       ^^^ flags                             base id = 5

GID 0 is always the empty cell.
"""

FLIPPED_HORIZONTALLY = 0x80000000
FLIPPED_VERTICALLY = 0x40000000
FLIPPED_DIAGONALLY = 0x20000000

FLIP_MASK = FLIPPED_HORIZONTALLY | FLIPPED_VERTICALLY | FLIPPED_DIAGONALLY
GID_MASK = 0xFFFFFFFF


def base_id(gid: int) -> int:
    """Tile reference with the flip flags stripped."""
    return gid & ~FLIP_MASK & GID_MASK


def flip_bits(gid: int) -> int:
    """Only the flip flags of a GID."""
    return gid & FLIP_MASK


def with_flip_bits(base: int, flags: int) -> int:
    """Combine a base id with flip flags taken from another GID."""
    return (base_id(base) | flip_bits(flags)) & GID_MASK
