"""
Exception hierarchy for map transforms.

Structural errors abort the processing of a single map file. The batch
driver catches them per file, so one bad map never stops a whole run.

Non-finite object geometry is not an error: it is coerced to 0 by the
object transformer.
"""

from pathlib import Path
from typing import Optional, Union


class MapToolsError(Exception):
    """Base class for every error raised by tmj_tools."""


class UnsupportedMapKind(MapToolsError):
    """Infinite map, chunked tile layer or encoded tile data."""


class MissingLayerData(MapToolsError):
    """A map has no layers, or a tile layer has no flat data block."""


class LayerSizeMismatch(MissingLayerData):
    """A tile layer's data length disagrees with width * height."""


class MalformedMap(MapToolsError):
    """
    A record has the wrong JSON shape: a layer, tileset or object that is
    not an object, or a map size that is not an integer.
    """


class MissingTileset(MapToolsError):
    """No tileset, or the tileset has no firstgid."""


class MapFileError(MapToolsError):
    """
    Reading, parsing or writing a map file failed.

    Wraps OSError and JSON decode errors so callers only need to catch
    MapToolsError.
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
