"""Tests for whole-map rotation."""

import logging

import pytest

from tmj_manager import TiledMap
from tmj_tools.errors import LayerSizeMismatch, MissingLayerData, UnsupportedMapKind
from tmj_tools.rotation import rotate_ccw, rotate_cw, rotate_map
from tmj_tools.transform.direction import Direction

from conftest import FLIP_H


def minimal_map(**overrides) -> dict:
    data = {
        "width": 3, "height": 2, "tilewidth": 32, "tileheight": 32, "infinite": False,
        "tilesets": [{"firstgid": 1, "name": "neumont_tileset_32"}],
        "layers": [{"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
                    "data": [1, 2, 3, 4, 5, 6]}],
    }
    data.update(overrides)
    return data


class TestRotateMap:
    """A single clockwise turn of the sample map (64x48 px)."""

    @pytest.fixture
    def rotated(self, sample_map) -> TiledMap:
        return rotate_map(sample_map, Direction.CLOCKWISE)

    def test_map_size_swapped(self, rotated) -> None:
        assert (rotated.width, rotated.height) == (3, 4)
        assert (rotated.tilewidth, rotated.tileheight) == (16, 16)

    def test_tile_layers(self, rotated) -> None:
        ground = rotated.get_layer_by_name("Ground")
        assert (ground.width, ground.height) == (3, 4)
        assert list(ground.data) == [3, 9, 9,
                                     9, 9 | FLIP_H, 9,
                                     9, 0, 9,
                                     9, 9, 2]

    def test_nested_tile_layer(self, rotated) -> None:
        overlay = rotated.get_layer_by_name("Overlay")
        assert list(overlay.data) == [0, 0, 0,
                                      0, 5, 0,
                                      0, 0, 0,
                                      7, 0, 0]

    def test_objects(self, rotated) -> None:
        portal = rotated.get_layer_by_name("Portals").objects[0]
        assert (portal.x, portal.y, portal.width, portal.height) == (32, 16, 8, 16)
        assert portal.rotation == 90

        spawn = rotated.get_layer_by_name("Spawns").objects[0]
        assert (spawn.x, spawn.y) == (8, 8)

    def test_grouped_objects(self, rotated) -> None:
        lamp, fence, path = rotated.get_layer_by_name("Shapes").objects
        assert (lamp.x, lamp.y, lamp.width, lamp.height) == (0, 16, 16, 16)
        assert (fence.x, fence.y) == (32, 4)
        assert fence.points == [(12, 0), (12, 20), (0, 20)]
        assert fence.rotation == 135
        assert (path.x, path.y) == (8, 2)
        assert path.points == [(10, 0), (0, 30)]

    def test_object_layer_size_follows_map(self, rotated) -> None:
        portals = rotated.get_layer_by_name("Portals")
        assert (portals.width, portals.height) == (3, 4)
        spawns = rotated.get_layer_by_name("Spawns")
        assert spawns.width is None and spawns.height is None

    def test_image_layer_offset(self, rotated) -> None:
        backdrop = rotated.get_layer_by_name("Backdrop")
        assert (backdrop.offsetx, backdrop.offsety) == (38, 6)

    def test_everything_else_is_untouched(self, sample_map, rotated) -> None:
        before, after = sample_map.to_dict(), rotated.to_dict()
        for key in ("tilesets", "version", "tiledversion", "nextobjectid", "compressionlevel"):
            assert after[key] == before[key]
        assert after["layers"][4]["image"] == "sky.png"
        assert [layer["name"] for layer in after["layers"]] == \
               [layer["name"] for layer in before["layers"]]

    def test_input_is_not_modified(self, sample_map, sample_map_dict) -> None:
        rotate_map(sample_map, Direction.CLOCKWISE)
        assert sample_map.to_dict() == sample_map_dict


class TestComposition:

    def test_cw_then_ccw_is_identity(self, sample_map, sample_map_dict) -> None:
        assert rotate_ccw(rotate_cw(sample_map)).to_dict() == sample_map_dict

    def test_four_clockwise_turns_are_identity(self, sample_map, sample_map_dict) -> None:
        result = sample_map
        for _ in range(4):
            result = rotate_cw(result)
        assert result.to_dict() == sample_map_dict

    def test_half_turn_either_way(self, sample_map) -> None:
        assert rotate_map(sample_map, "cw", turns=2).to_dict() == \
               rotate_map(sample_map, "ccw", turns=2).to_dict()

    def test_turns_match_repeated_calls(self, sample_map) -> None:
        once = rotate_cw(rotate_cw(rotate_cw(sample_map)))
        assert rotate_map(sample_map, "cw", turns=3).to_dict() == once.to_dict()
        assert rotate_map(sample_map, "ccw").to_dict() == once.to_dict()

    def test_zero_turns_copy(self, sample_map, sample_map_dict) -> None:
        result = rotate_map(sample_map, turns=0)
        assert result is not sample_map
        assert result.to_dict() == sample_map_dict


class TestAliasesDuringRotation:

    def test_target_floor_added(self) -> None:
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
             "data": [1, 2, 3, 4, 5, 6]},
            {"type": "objectgroup", "name": "Portals", "objects": [
                {"id": 1, "x": 0, "y": 0, "width": 32, "height": 32,
                 "properties": [{"name": "targetMap", "type": "string", "value": "basement"}]}]},
        ]))
        rotated = rotate_cw(document)
        portal = rotated.get_layer_by_name("Portals").objects[0]
        assert portal.get_property("targetFloor") == "basement"
        assert "targetFloor" not in document.get_layer_by_name("Portals").objects[0].properties


class TestRejection:

    def test_infinite_map(self) -> None:
        document = TiledMap.from_dict(minimal_map(infinite=True))
        before = document.to_dict()
        with pytest.raises(UnsupportedMapKind):
            rotate_map(document, Direction.CLOCKWISE)
        assert document.to_dict() == before

    def test_no_layers(self) -> None:
        with pytest.raises(MissingLayerData):
            rotate_map(TiledMap.from_dict(minimal_map(layers=[])))

    def test_chunked_layer(self) -> None:
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
             "chunks": [{"x": 0, "y": 0, "width": 3, "height": 2, "data": [1] * 6}]}]))
        with pytest.raises(UnsupportedMapKind, match="chunked"):
            rotate_map(document)

    def test_base64_layer(self) -> None:
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
             "encoding": "base64", "data": "AQAAAAIAAAA="}]))
        with pytest.raises(UnsupportedMapKind, match="base64"):
            rotate_map(document)

    def test_missing_tile_data(self) -> None:
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2}]))
        with pytest.raises(MissingLayerData, match="Ground"):
            rotate_map(document)

    def test_wrong_data_length(self) -> None:
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 3, "height": 2,
             "data": [1, 2, 3, 4]}]))
        with pytest.raises(LayerSizeMismatch):
            rotate_map(document)

    def test_tile_layer_uses_map_size(self) -> None:
        # Layer claims 2x3 but the map is 3x2; the map size wins
        document = TiledMap.from_dict(minimal_map(layers=[
            {"type": "tilelayer", "name": "Ground", "width": 2, "height": 3,
             "data": [1, 2, 3, 4, 5, 6]}]))
        rotated = rotate_cw(document)
        assert list(rotated.layers[0].data) == [4, 1, 5, 2, 6, 3]


class TestWarnings:

    def test_non_square_tiles(self, caplog) -> None:
        document = TiledMap.from_dict(minimal_map(tileheight=16))
        with caplog.at_level(logging.WARNING, logger="tmj_tools"):
            rotated = rotate_cw(document)
        assert "not square" in caplog.text
        assert (rotated.tilewidth, rotated.tileheight) == (32, 16)
