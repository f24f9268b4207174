#!/usr/bin/env python3

"""
Module for reading, modifying and writing Tiled JSON map files (TMJ)

=============================================================================
WHAT IS A TILED JSON MAP?
=============================================================================

Tiled can save maps as JSON instead of XML. The JSON flavour (".tmj", or
plain ".json") carries the same information as a TMX file:

- Map dimensions and tile sizes
- Tilesets (embedded, or references to external tileset files)
- Layers (tile layers, object layers, groups, image layers)
- Custom properties (metadata on any element)

A minimal map looks like this:

    {
      "width": 3, "height": 2, "tilewidth": 32, "tileheight": 32,
      "infinite": false,
      "tilesets": [{"firstgid": 1, "name": "terrain"}],
      "layers": [
        {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
         "data": [1, 2, 3, 4, 5, 6]},
        {"type": "objectgroup", "name": "Portals",
         "objects": [{"id": 1, "x": 64, "y": 32, "width": 32, "height": 32,
                      "properties": [{"name": "targetMap", "type": "string",
                                      "value": "basement"}]}]}
      ]
    }

=============================================================================
GLOBAL TILE IDs (GIDs)
=============================================================================

Tiles are referenced by Global IDs across all tilesets:

    Tileset A (firstgid=1):   tiles 1-100
    Tileset B (firstgid=101): tiles 101-200

    GID 0   = empty tile (no graphic)
    GID 150 = tile 49 of tileset B

The three high bits of a GID are flip flags (see tmj_tools.gid). They must be
stripped before looking a tile up and preserved when a tile is replaced.

=============================================================================
ROUND-TRIPPING
=============================================================================

Only the fields the map tools work with are modelled explicitly. Every other
key (editor settings, "nextobjectid", "class", text objects, parallax, ...)
is kept in the element's `extra` mapping and written back unchanged, so a
load/save cycle never drops information.

Tile data is supported in its flat form (a list of GIDs). Chunked layers of
infinite maps and base64 encoded data blocks are carried through opaquely
but cannot be transformed.

=============================================================================
"""

import array
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Any, Union, Iterator, Tuple

import orjson

from tmj_tools.errors import MalformedMap, MapFileError, MissingLayerData, UnsupportedMapKind
from tmj_tools.gid import base_id


def _extra(data: Dict[str, Any], known: frozenset) -> Dict[str, Any]:
    """Keys of a JSON element that the model does not handle itself."""
    return {key: value for key, value in data.items() if key not in known}


# -----------------------------------------------------------------------------
# SHAPE CHECKS
# -----------------------------------------------------------------------------
# Hand-edited or generated maps are not always what Tiled writes. Anything
# with the wrong JSON shape is rejected here, as a MalformedMap, so the
# transforms never see it.

def _record(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedMap(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _records(data: Dict[str, Any], key: str, what: str) -> List[Dict[str, Any]]:
    """The list stored under `key` (missing = empty), every entry an object."""
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedMap(f"{what} \"{key}\" must be a list, got {type(items).__name__}")
    return [_record(item, f"{what} \"{key}\" entry") for item in items]


def _int_field(data: Dict[str, Any], key: str, what: str, default: int = 0) -> int:
    value = data.get(key, default)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedMap(f"{what} \"{key}\" must be an integer, got {value!r}")
    return value


# =============================================================================
# PROPERTY CLASS
# =============================================================================

@dataclass
class Property:
    """
    Custom property attached to a map, layer, tileset or object.

    In Tiled JSON properties are a list of {name, type, value} records:

        "properties": [
            {"name": "targetMap", "type": "string", "value": "basement"},
            {"name": "locked", "type": "bool", "value": true}
        ]

    Values are already typed by JSON, so no conversion is needed.
    Supported types: string, int, float, bool, color, file, object, class.
    """
    name: str                                        # Property name (key)
    type: str = "string"                             # Value type
    value: Any = None                                # The actual value
    extra: Dict[str, Any] = field(default_factory=dict)   # e.g. propertytype

    _KNOWN = frozenset({"name", "type", "value"})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Property':
        return cls(
            name=data.get("name", ""),
            type=data.get("type", "string"),
            value=data.get("value"),
            extra=_extra(data, cls._KNOWN)
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"name": self.name, "type": self.type, "value": self.value}
        result.update(self.extra)
        return result


def _infer_property_type(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    return "string"


def parse_properties(raw: Any) -> Dict[str, Property]:
    """
    Parse a "properties" block into an insertion-ordered name -> Property map.

    Accepts the list form written by Tiled 1.2+ and the older
    {name: value} object form (types are inferred for the latter).
    """
    properties: Dict[str, Property] = {}
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict):
                prop = Property.from_dict(item)
                if not isinstance(prop.name, str):
                    raise MalformedMap(f"Property name must be a string, got {prop.name!r}")
                properties[prop.name] = prop
    elif isinstance(raw, dict):
        for name, value in raw.items():
            properties[name] = Property(name=name, type=_infer_property_type(value),
                                        value=value)
    return properties


def dump_properties(properties: Dict[str, Property]) -> List[Dict[str, Any]]:
    return [prop.to_dict() for prop in properties.values()]


# =============================================================================
# TILESET CLASS
# =============================================================================

@dataclass
class Tileset:
    """
    Tileset reference inside a map.

    ==========================================================================
    EMBEDDED vs EXTERNAL TILESETS
    ==========================================================================

    EMBEDDED: the full tileset definition sits inside the map
        {"firstgid": 1, "name": "terrain", "tilewidth": 32, "image": ...}

    EXTERNAL: the map only points to a .tsj/.tsx file
        {"firstgid": 1, "source": "terrain.tsj"}

    In both cases `firstgid` lives in the map, because it depends on which
    other tilesets the map uses. The map tools need only `firstgid` and
    `name`; image, spacing, per-tile metadata etc. stay in `extra`.

    ==========================================================================
    """
    firstgid: Optional[int] = None                   # First Global ID
    name: str = ""                                   # Tileset name
    source: Optional[str] = None                     # External file (if any)
    tilewidth: Optional[int] = None                  # Tile width in pixels
    tileheight: Optional[int] = None                 # Tile height in pixels
    tilecount: Optional[int] = None                  # Total number of tiles
    properties: Dict[str, Property] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = frozenset({"firstgid", "name", "source", "tilewidth", "tileheight",
                        "tilecount", "properties"})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Tileset':
        data = _record(data, "Tileset")
        firstgid = data.get("firstgid")
        # bool is an int subclass; a "true" firstgid is as good as none
        if isinstance(firstgid, bool) or not isinstance(firstgid, int):
            firstgid = None
        return cls(
            firstgid=firstgid,
            name=data.get("name", ""),
            source=data.get("source"),
            tilewidth=data.get("tilewidth"),
            tileheight=data.get("tileheight"),
            tilecount=data.get("tilecount"),
            properties=parse_properties(data.get("properties")),
            extra=_extra(data, cls._KNOWN)
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.firstgid is not None:
            result["firstgid"] = self.firstgid
        # External tilesets only carry firstgid and source
        if self.source is not None:
            result["source"] = self.source
        if self.name or self.source is None:
            result["name"] = self.name
        for key in ("tilewidth", "tileheight", "tilecount"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.properties:
            result["properties"] = dump_properties(self.properties)
        result.update(self.extra)
        return result


# =============================================================================
# LAYER BASE CLASS
# =============================================================================

@dataclass
class BaseLayer:
    """
    Fields shared by every layer type.

    Rendering properties:
    - visible: Whether layer is rendered
    - opacity: Transparency (0.0 = invisible, 1.0 = opaque)

    Positioning:
    - offsetx, offsety: Pixel offset from map origin (only written by Tiled
      when non-zero, so they stay None when absent)
    - width, height: Tile layers always have them; older Tiled versions also
      write the map size on object groups and image layers
    """
    name: str = ""                                   # Layer name
    id: Optional[int] = None                         # Unique layer ID
    visible: bool = True                             # Is layer rendered?
    opacity: float = 1                               # Transparency
    x: int = 0                                       # Always 0 in Tiled
    y: int = 0
    offsetx: Optional[float] = None                  # X pixel offset
    offsety: Optional[float] = None                  # Y pixel offset
    width: Optional[int] = None                      # Width in tiles
    height: Optional[int] = None                     # Height in tiles
    properties: Dict[str, Property] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    TYPE = ""
    _BASE_KNOWN = frozenset({"type", "name", "id", "visible", "opacity", "x", "y",
                             "offsetx", "offsety", "width", "height", "properties"})
    _KNOWN = _BASE_KNOWN

    @classmethod
    def _base_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return dict(
            name=data.get("name", ""),
            id=data.get("id"),
            visible=data.get("visible", True),
            opacity=data.get("opacity", 1),
            x=data.get("x", 0),
            y=data.get("y", 0),
            offsetx=data.get("offsetx"),
            offsety=data.get("offsety"),
            width=data.get("width"),
            height=data.get("height"),
            properties=parse_properties(data.get("properties")),
            extra=_extra(data, cls._KNOWN)
        )

    def _base_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        result["name"] = self.name
        result["type"] = self.TYPE
        result["visible"] = self.visible
        result["opacity"] = self.opacity
        result["x"] = self.x
        result["y"] = self.y
        if self.offsetx is not None:
            result["offsetx"] = self.offsetx
        if self.offsety is not None:
            result["offsety"] = self.offsety
        if self.width is not None:
            result["width"] = self.width
        if self.height is not None:
            result["height"] = self.height
        if self.properties:
            result["properties"] = dump_properties(self.properties)
        return result


# =============================================================================
# TILE LAYER CLASS
# =============================================================================

@dataclass
class TileLayer(BaseLayer):
    """
    Tile layer - a grid of tile references.

    ==========================================================================
    DATA FORMS
    ==========================================================================

    1. Flat list (the only form the transforms accept):
       "data": [1, 2, 3, 4, 5, 6]
       Stored here as array.array('I') - unsigned 32-bit ints, so flip
       flags survive untouched. Index calculation: data[y * width + x]

    2. Base64 string ("encoding": "base64", optional "compression"):
       kept verbatim in `raw_data`.

    3. Chunks (infinite maps): "chunks": [{x, y, width, height, data}, ...]
       kept verbatim in `chunks`.

    ==========================================================================
    """
    data: Optional[array.array] = None               # Flat GID grid
    raw_data: Optional[str] = None                   # Encoded data block
    chunks: Optional[List[Any]] = None               # Infinite map chunks
    encoding: Optional[str] = None                   # csv / base64
    compression: Optional[str] = None                # zlib / gzip / zstd

    TYPE = "tilelayer"
    _KNOWN = BaseLayer._BASE_KNOWN | {"data", "chunks", "encoding", "compression"}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TileLayer':
        layer = cls(**cls._base_kwargs(data))
        what = f"Tile layer \"{layer.name}\""
        layer.width = _int_field(data, "width", what)
        layer.height = _int_field(data, "height", what)
        layer.encoding = data.get("encoding")
        layer.compression = data.get("compression")

        raw = data.get("data")
        if isinstance(raw, list):
            try:
                layer.data = array.array('I', raw)
            except (TypeError, OverflowError):
                raise MissingLayerData(
                    f"{what} has non-GID data (cells must be integers in 0..0xFFFFFFFF)"
                ) from None
        elif isinstance(raw, str):
            layer.raw_data = raw

        if "chunks" in data:
            layer.chunks = data["chunks"]
        return layer

    def to_dict(self) -> Dict[str, Any]:
        result = self._base_dict()
        if self.encoding is not None:
            result["encoding"] = self.encoding
        if self.compression is not None:
            result["compression"] = self.compression
        if self.data is not None:
            result["data"] = self.data.tolist()
        elif self.raw_data is not None:
            result["data"] = self.raw_data
        if self.chunks is not None:
            result["chunks"] = self.chunks
        result.update(self.extra)
        return result

    @property
    def is_chunked(self) -> bool:
        return self.chunks is not None

    @property
    def is_encoded(self) -> bool:
        return self.raw_data is not None or self.encoding == "base64"


# =============================================================================
# MAP OBJECT CLASS
# =============================================================================

class ObjectShape(Enum):
    """
    Shape of a map object. Decides which rotation rule applies.

    RECTANGLE / ELLIPSE:  x, y is the top-left corner of width x height
    POINT:                just x, y
    TILE:                 has a gid; x, y is the BOTTOM-left corner
    POLYGON / POLYLINE:   x, y is an anchor, points are offsets from it
    """
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    POINT = "point"
    TILE = "tile"
    POLYGON = "polygon"
    POLYLINE = "polyline"


@dataclass
class MapObject:
    """
    Object in an object layer.

    Objects are vector shapes placed on the map, used for:
    - Spawn points (usually points)
    - Portals and trigger areas (rectangles carrying targetMap etc.)
    - Collision shapes (rectangles, polygons)
    - Decorations (tile objects)

    Text objects keep their "text" record in `extra` and are positioned like
    rectangles.
    """
    id: int = 0                                      # Unique object ID
    name: str = ""                                   # Object name
    type: str = ""                                   # Object type/class
    x: float = 0                                     # X position (pixels)
    y: float = 0                                     # Y position (pixels)
    width: float = 0                                 # Width (0 for points)
    height: float = 0                                # Height (0 for points)
    rotation: float = 0                              # Rotation in degrees
    visible: bool = True                             # Is object visible?
    shape: ObjectShape = ObjectShape.RECTANGLE       # Rotation rule selector
    gid: Optional[int] = None                        # Tile GID (tile objects)
    points: List[Tuple[float, float]] = field(default_factory=list)
    properties: Dict[str, Property] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = frozenset({"id", "name", "type", "x", "y", "width", "height", "rotation",
                        "visible", "gid", "point", "ellipse", "polygon", "polyline",
                        "properties"})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MapObject':
        obj = cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            type=data.get("type", ""),
            x=data.get("x", 0),
            y=data.get("y", 0),
            width=data.get("width", 0),
            height=data.get("height", 0),
            rotation=data.get("rotation", 0),
            visible=data.get("visible", True),
            properties=parse_properties(data.get("properties")),
            extra=_extra(data, cls._KNOWN)
        )

        # -----------------------------------------------------------------
        # SHAPE DETECTION
        # -----------------------------------------------------------------
        # Point lists win over everything else, then the point flag, then
        # the gid (tile objects), then the ellipse flag
        if isinstance(data.get("polygon"), list):
            obj.shape = ObjectShape.POLYGON
            obj.points = _parse_points(data["polygon"])
        elif isinstance(data.get("polyline"), list):
            obj.shape = ObjectShape.POLYLINE
            obj.points = _parse_points(data["polyline"])
        elif data.get("point"):
            obj.shape = ObjectShape.POINT
        elif isinstance(data.get("gid"), int) and not isinstance(data.get("gid"), bool):
            obj.shape = ObjectShape.TILE
            obj.gid = data["gid"]
        elif data.get("ellipse"):
            obj.shape = ObjectShape.ELLIPSE
        return obj

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
            "visible": self.visible,
        }
        if self.shape is ObjectShape.TILE:
            result["gid"] = self.gid
        elif self.shape is ObjectShape.POINT:
            result["point"] = True
        elif self.shape is ObjectShape.ELLIPSE:
            result["ellipse"] = True
        elif self.shape in (ObjectShape.POLYGON, ObjectShape.POLYLINE):
            result[self.shape.value] = [{"x": px, "y": py} for px, py in self.points]
        if self.properties:
            result["properties"] = dump_properties(self.properties)
        result.update(self.extra)
        return result

    def get_property(self, name: str, default: Any = None) -> Any:
        prop = self.properties.get(name)
        return prop.value if prop is not None else default


def _parse_points(raw: List[Any]) -> List[Tuple[float, float]]:
    return [(point.get("x", 0), point.get("y", 0)) for point in raw
            if isinstance(point, dict)]


# =============================================================================
# OBJECT GROUP CLASS
# =============================================================================

@dataclass
class ObjectGroup(BaseLayer):
    """
    Object layer - contains vector objects.

    Objects are stored in a list (draw order may matter for some games).
    """
    objects: List[MapObject] = field(default_factory=list)

    TYPE = "objectgroup"
    _KNOWN = BaseLayer._BASE_KNOWN | {"objects"}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ObjectGroup':
        group = cls(**cls._base_kwargs(data))
        for obj_data in _records(data, "objects", f"Object layer \"{group.name}\""):
            group.objects.append(MapObject.from_dict(obj_data))
        return group

    def to_dict(self) -> Dict[str, Any]:
        result = self._base_dict()
        result["objects"] = [obj.to_dict() for obj in self.objects]
        result.update(self.extra)
        return result


# =============================================================================
# IMAGE LAYER CLASS
# =============================================================================

@dataclass
class ImageLayer(BaseLayer):
    """
    Image layer - a single background image placed by its pixel offset.

    The image path, transparent colour and repeat flags stay in `extra`;
    only the offset takes part in geometry transforms.
    """
    TYPE = "imagelayer"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImageLayer':
        return cls(**cls._base_kwargs(data))

    def to_dict(self) -> Dict[str, Any]:
        result = self._base_dict()
        result.update(self.extra)
        return result


# =============================================================================
# LAYER GROUP CLASS
# =============================================================================

@dataclass
class LayerGroup(BaseLayer):
    """
    Group of layers - a folder containing other layers.

    Layers:
    ├── Background (group)
    │   ├── Sky
    │   └── Mountains
    ├── Gameplay (group)
    │   ├── Ground
    │   ├── Portals
    │   └── Collisions
    └── Foreground

    Groups can be nested (groups within groups). Each group owns its
    children; there are no back references.
    """
    # Recursive type: can contain any layer, including more LayerGroups
    layers: List['LayerNode'] = field(default_factory=list)

    TYPE = "group"
    _KNOWN = BaseLayer._BASE_KNOWN | {"layers"}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerGroup':
        group = cls(**cls._base_kwargs(data))
        for child in _records(data, "layers", f"Group \"{group.name}\""):
            group.layers.append(parse_layer(child))
        return group

    def to_dict(self) -> Dict[str, Any]:
        result = self._base_dict()
        result["layers"] = [layer.to_dict() for layer in self.layers]
        result.update(self.extra)
        return result


LayerNode = Union[TileLayer, ObjectGroup, LayerGroup, ImageLayer]

LAYER_TYPES = {
    TileLayer.TYPE: TileLayer,
    ObjectGroup.TYPE: ObjectGroup,
    LayerGroup.TYPE: LayerGroup,
    ImageLayer.TYPE: ImageLayer,
}


def parse_layer(data: Dict[str, Any]) -> LayerNode:
    """
    Build the right layer class from a JSON layer record.

    The "type" tag is only looked at here; everything downstream works with
    the four layer classes.
    """
    data = _record(data, "Layer")
    layer_type = data.get("type")
    layer_cls = LAYER_TYPES.get(layer_type) if isinstance(layer_type, str) else None
    if layer_cls is None:
        raise UnsupportedMapKind(
            f"Layer \"{data.get('name', '')}\" has unknown type {layer_type!r}"
        )
    return layer_cls.from_dict(data)


# =============================================================================
# TILED MAP CLASS (Main Entry Point)
# =============================================================================

@dataclass
class TiledMap:
    """
    Complete Tiled map - the root object for Tiled JSON files.

    ==========================================================================
    USAGE
    ==========================================================================

    Loading:
        map_data = TiledMap.load("floor1.json")
        print(f"Map size: {map_data.width}x{map_data.height}")

    Accessing layers:
        ground = map_data.get_layer_by_name("Ground")
        tile_gid = ground.data[10 * ground.width + 5]

    Modifying:
        ground.data[10 * ground.width + 5] = 42
        map_data.save("floor1.json")

    Malformed records raise MalformedMap (or MissingLayerData for tile data
    that is not a list of GIDs) while loading.

    ==========================================================================
    """
    width: int = 0                                   # Map width in tiles
    height: int = 0                                  # Map height in tiles
    tilewidth: int = 0                               # Tile width in pixels
    tileheight: int = 0                              # Tile height in pixels
    infinite: bool = False                           # Is map infinite?
    orientation: str = "orthogonal"                  # Map orientation
    renderorder: str = "right-down"                  # Render order
    properties: Dict[str, Property] = field(default_factory=dict)
    tilesets: List[Tileset] = field(default_factory=list)
    layers: List[LayerNode] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = frozenset({"width", "height", "tilewidth", "tileheight", "infinite",
                        "orientation", "renderorder", "properties", "tilesets",
                        "layers", "type"})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TiledMap':
        data = _record(data, "Map")
        map_obj = cls(
            width=_int_field(data, "width", "Map"),
            height=_int_field(data, "height", "Map"),
            tilewidth=_int_field(data, "tilewidth", "Map"),
            tileheight=_int_field(data, "tileheight", "Map"),
            infinite=bool(data.get("infinite", False)),
            orientation=data.get("orientation", "orthogonal"),
            renderorder=data.get("renderorder", "right-down"),
            properties=parse_properties(data.get("properties")),
            extra=_extra(data, cls._KNOWN)
        )
        for tileset_data in _records(data, "tilesets", "Map"):
            map_obj.tilesets.append(Tileset.from_dict(tileset_data))
        for layer_data in _records(data, "layers", "Map"):
            map_obj.layers.append(parse_layer(layer_data))
        return map_obj

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "type": "map",
            "orientation": self.orientation,
            "renderorder": self.renderorder,
            "width": self.width,
            "height": self.height,
            "tilewidth": self.tilewidth,
            "tileheight": self.tileheight,
            "infinite": self.infinite,
        }
        if self.properties:
            result["properties"] = dump_properties(self.properties)
        result["tilesets"] = [tileset.to_dict() for tileset in self.tilesets]
        result["layers"] = [layer.to_dict() for layer in self.layers]
        result.update(self.extra)
        return result

    @classmethod
    def from_json(cls, raw: Union[bytes, str]) -> 'TiledMap':
        data = orjson.loads(raw)
        if not isinstance(data, dict):
            raise orjson.JSONDecodeError("Map document must be a JSON object", "", 0)
        return cls.from_dict(data)

    def to_json(self) -> bytes:
        """Serialize with two-space indentation and a trailing newline."""
        return orjson.dumps(self.to_dict(),
                            option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'TiledMap':
        """
        Load a Tiled JSON map from disk.

        Raises:
        -------
        MapFileError : the file cannot be read or is not a JSON object
        UnsupportedMapKind : a layer has an unknown type
        """
        filepath = Path(filepath)
        try:
            raw = filepath.read_bytes()
        except OSError as e:
            raise MapFileError(f"Cannot read map: {e}", filepath) from e
        try:
            return cls.from_json(raw)
        except orjson.JSONDecodeError as e:
            raise MapFileError(f"Invalid JSON: {e}", filepath) from e

    def save(self, filepath: Union[str, Path]):
        """Write the map to disk, replacing the file."""
        filepath = Path(filepath)
        try:
            filepath.write_bytes(self.to_json())
        except OSError as e:
            raise MapFileError(f"Cannot write map: {e}", filepath) from e

    @property
    def pixel_width(self) -> int:
        return self.width * self.tilewidth

    @property
    def pixel_height(self) -> int:
        return self.height * self.tileheight

    def get_tileset_for_gid(self, gid: int) -> Optional[Tileset]:
        """
        Find which tileset contains a given GID (flip flags are ignored).

        A GID belongs to the tileset with the largest firstgid <= gid:

            Tileset A: firstgid=1
            Tileset B: firstgid=101

            GID 50  → Tileset A
            GID 150 → Tileset B
        """
        tile_id = base_id(gid)
        if not tile_id:
            return None
        candidates = [ts for ts in self.tilesets
                      if ts.firstgid is not None and ts.firstgid <= tile_id]
        if not candidates:
            return None
        return max(candidates, key=lambda ts: ts.firstgid)

    def get_tileset_by_name(self, name: str) -> Optional[Tileset]:
        for tileset in self.tilesets:
            if tileset.name == name:
                return tileset
        return None

    def get_layer_by_name(self, name: str) -> Optional[LayerNode]:
        """Find a layer by name (searches recursively through groups)."""
        def search_layers(layers):
            for layer in layers:
                if layer.name == name:
                    return layer
                if isinstance(layer, LayerGroup):
                    result = search_layers(layer.layers)
                    if result:
                        return result
            return None

        return search_layers(self.layers)

    def get_all_layers_flat(self) -> List[Union[TileLayer, ObjectGroup, ImageLayer]]:
        """
        Get all layers in a flat list (expanding groups recursively).

        Groups themselves are excluded.
        """
        result = []

        def flatten(layers):
            for layer in layers:
                if isinstance(layer, LayerGroup):
                    flatten(layer.layers)
                else:
                    result.append(layer)

        flatten(self.layers)
        return result

    def iter_tile_layers(self) -> Iterator[TileLayer]:
        for layer in self.get_all_layers_flat():
            if isinstance(layer, TileLayer):
                yield layer

    def iter_objects(self) -> Iterator[Tuple[ObjectGroup, MapObject]]:
        """Yield (layer, object) for every object in every object group."""
        for layer in self.get_all_layers_flat():
            if isinstance(layer, ObjectGroup):
                for obj in layer.objects:
                    yield layer, obj
