import copy
import sys
from pathlib import Path

import orjson
import pytest

# Ensure the project root is on sys.path for test imports without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FLIP_H = 0x80000000

# 4x3 tiles of 16px -> 64x48 pixels. Every element carries all the keys Tiled
# writes, so from_dict(...).to_dict() reproduces it exactly.
SAMPLE_MAP = {
    "compressionlevel": -1,
    "type": "map",
    "version": "1.10",
    "tiledversion": "1.10.2",
    "orientation": "orthogonal",
    "renderorder": "right-down",
    "width": 4,
    "height": 3,
    "tilewidth": 16,
    "tileheight": 16,
    "infinite": False,
    "nextlayerid": 8,
    "nextobjectid": 6,
    "tilesets": [
        {
            "firstgid": 1,
            "name": "neumont_tileset_32",
            "tilewidth": 16,
            "tileheight": 16,
            "tilecount": 64,
            "columns": 8,
            "image": "tiles.png",
            "imagewidth": 128,
            "imageheight": 128,
            "margin": 0,
            "spacing": 0,
        }
    ],
    "layers": [
        {
            "id": 1,
            "name": "Ground",
            "type": "tilelayer",
            "visible": True,
            "opacity": 1,
            "x": 0,
            "y": 0,
            "width": 4,
            "height": 3,
            "data": [9, 9, 9, 2,
                     9, 9 | FLIP_H, 0, 9,
                     3, 9, 9, 9],
        },
        {
            "id": 2,
            "name": "Portals",
            "type": "objectgroup",
            "visible": True,
            "opacity": 1,
            "x": 0,
            "y": 0,
            "width": 4,
            "height": 3,
            "draworder": "topdown",
            "objects": [
                {
                    "id": 1,
                    "name": "stairs",
                    "type": "portal",
                    "x": 16,
                    "y": 8,
                    "width": 16,
                    "height": 8,
                    "rotation": 0,
                    "visible": True,
                    "properties": [
                        {"name": "targetMap", "type": "string", "value": "basement"},
                        {"name": "targetFloor", "type": "string", "value": "basement"},
                        {"name": "targetSpawn", "type": "string", "value": "top"},
                    ],
                }
            ],
        },
        {
            "id": 3,
            "name": "Spawns",
            "type": "objectgroup",
            "visible": True,
            "opacity": 1,
            "x": 0,
            "y": 0,
            "draworder": "topdown",
            "objects": [
                {
                    "id": 2,
                    "name": "start",
                    "type": "spawn",
                    "x": 8,
                    "y": 40,
                    "width": 0,
                    "height": 0,
                    "rotation": 0,
                    "visible": True,
                    "point": True,
                }
            ],
        },
        {
            "id": 4,
            "name": "Decor",
            "type": "group",
            "visible": True,
            "opacity": 1,
            "x": 0,
            "y": 0,
            "layers": [
                {
                    "id": 5,
                    "name": "Overlay",
                    "type": "tilelayer",
                    "visible": True,
                    "opacity": 1,
                    "x": 0,
                    "y": 0,
                    "width": 4,
                    "height": 3,
                    "data": [0, 0, 0, 0,
                             0, 5, 0, 0,
                             0, 0, 0, 7],
                },
                {
                    "id": 6,
                    "name": "Shapes",
                    "type": "objectgroup",
                    "visible": True,
                    "opacity": 1,
                    "x": 0,
                    "y": 0,
                    "draworder": "topdown",
                    "objects": [
                        {
                            "id": 3,
                            "name": "lamp",
                            "type": "",
                            "x": 0,
                            "y": 48,
                            "width": 16,
                            "height": 16,
                            "rotation": 0,
                            "visible": True,
                            "gid": 12,
                        },
                        {
                            "id": 4,
                            "name": "fence",
                            "type": "",
                            "x": 4,
                            "y": 4,
                            "width": 0,
                            "height": 0,
                            "rotation": 45,
                            "visible": True,
                            "polygon": [{"x": 0, "y": 0}, {"x": 20, "y": 0}, {"x": 20, "y": 12}],
                        },
                        {
                            "id": 5,
                            "name": "path",
                            "type": "",
                            "x": 2,
                            "y": 30,
                            "width": 0,
                            "height": 0,
                            "rotation": 0,
                            "visible": True,
                            "polyline": [{"x": 0, "y": 0}, {"x": 30, "y": 10}],
                        },
                    ],
                },
            ],
        },
        {
            "id": 7,
            "name": "Backdrop",
            "type": "imagelayer",
            "visible": True,
            "opacity": 1,
            "x": 0,
            "y": 0,
            "offsetx": 6,
            "offsety": 10,
            "image": "sky.png",
            "repeatx": False,
            "repeaty": False,
        },
    ],
}


@pytest.fixture
def sample_map_dict():
    return copy.deepcopy(SAMPLE_MAP)


@pytest.fixture
def sample_map(sample_map_dict):
    from tmj_manager import TiledMap

    return TiledMap.from_dict(sample_map_dict)


@pytest.fixture
def write_map(tmp_path):
    """Write a map dict as JSON and return its path."""
    def _write(data, name="map.json", directory=None):
        directory = Path(directory) if directory is not None else tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(orjson.dumps(data))
        return path

    return _write
