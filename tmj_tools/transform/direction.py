from enum import Enum
from typing import Union


class Direction(Enum):
    """Quarter-turn direction, as seen on screen (y grows downwards)."""

    CLOCKWISE = "cw"
    COUNTERCLOCKWISE = "ccw"

    @property
    def delta(self) -> int:
        """Degrees added to an object's rotation."""
        return 90 if self is Direction.CLOCKWISE else -90

    @property
    def numpy_k(self) -> int:
        # np.rot90 turns counter-clockwise for positive k
        return -1 if self is Direction.CLOCKWISE else 1

    @property
    def opposite(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTERCLOCKWISE
        return Direction.CLOCKWISE

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        if isinstance(value, Direction):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "")
        aliases = {
            "cw": cls.CLOCKWISE,
            "clockwise": cls.CLOCKWISE,
            "right": cls.CLOCKWISE,
            "ccw": cls.COUNTERCLOCKWISE,
            "counterclockwise": cls.COUNTERCLOCKWISE,
            "anticlockwise": cls.COUNTERCLOCKWISE,
            "left": cls.COUNTERCLOCKWISE,
        }
        if key not in aliases:
            raise ValueError(f"Unknown rotation direction: {value!r}")
        return aliases[key]
