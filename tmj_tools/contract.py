"""
What the game client needs from a map

The client looks the tileset up by name, draws every tile layer, places the
player on a spawn object and turns portal objects into map transitions:

    spawns   objects of layer "Spawns", otherwise objects of layer "Objects"
             whose type (or name) contains "spawn"
    portals  objects of layer "Portals", otherwise objects of layer "Objects"
             whose type (or name) contains "portal"; each needs a non-empty
             string targetMap, targetFloor / targetSpawn are optional strings

Transforms must keep all of this intact. `contract_fingerprint` captures the
parts that must not change, so a before/after comparison catches a transform
that renames or drops anything.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from tmj_manager import TiledMap, MapObject, ObjectGroup
from .config import DEFAULTS

ERROR = "error"
WARNING = "warning"

OPTIONAL_PORTAL_PROPERTIES = ("targetFloor", "targetSpawn")


@dataclass(frozen=True)
class ContractIssue:
    severity: str
    message: str

    def __str__(self) -> str:
        return f"{self.severity}: {self.message}"


def _find_marked_objects(document: TiledMap, layer_name: str, marker: str) -> List[MapObject]:
    layer = document.get_layer_by_name(layer_name)
    if isinstance(layer, ObjectGroup):
        return list(layer.objects)

    objects_layer = document.get_layer_by_name("Objects")
    if not isinstance(objects_layer, ObjectGroup):
        return []
    return [obj for obj in objects_layer.objects
            if marker in str(obj.type or obj.name or "").lower()]


def find_portal_objects(document: TiledMap) -> List[MapObject]:
    return _find_marked_objects(document, "Portals", "portal")


def find_spawn_objects(document: TiledMap) -> List[MapObject]:
    return _find_marked_objects(document, "Spawns", "spawn")


def _label(obj: MapObject) -> str:
    return obj.name or f"#{obj.id}"


def check_consumer_contract(document: TiledMap,
                            expected_tileset: str = DEFAULTS.expected_tileset) -> List[ContractIssue]:
    """List every way the map would break the game client. Empty list = fine."""
    issues: List[ContractIssue] = []

    if document.get_tileset_by_name(expected_tileset) is None:
        available = ", ".join(str(ts.name) for ts in document.tilesets if ts.name) or "none"
        issues.append(ContractIssue(
            ERROR, f"Tileset name mismatch. Expected \"{expected_tileset}\", "
                   f"but map contains: {available}"
        ))

    if not any(True for _ in document.iter_tile_layers()):
        issues.append(ContractIssue(ERROR, "No tile layers found"))

    for portal in find_portal_objects(document):
        target_map = portal.get_property("targetMap")
        if not isinstance(target_map, str) or not target_map:
            issues.append(ContractIssue(
                ERROR, f"Portal \"{_label(portal)}\" is missing a valid targetMap"
            ))
        for name in OPTIONAL_PORTAL_PROPERTIES:
            value = portal.get_property(name)
            if value is not None and not isinstance(value, str):
                issues.append(ContractIssue(
                    ERROR, f"Portal \"{_label(portal)}\" has non-string {name}: {value!r}"
                ))

    if not find_spawn_objects(document):
        issues.append(ContractIssue(WARNING, "No spawn objects found"))

    return issues


def has_errors(issues: List[ContractIssue]) -> bool:
    return any(issue.severity == ERROR for issue in issues)


def contract_fingerprint(document: TiledMap) -> Dict[str, Any]:
    """Names and portal targets the client depends on, geometry excluded."""
    def layer_names(layers, prefix=""):
        names = []
        for layer in layers:
            path = f"{prefix}{layer.name}"
            names.append((path, layer.TYPE))
            children = getattr(layer, "layers", None)
            if children is not None:
                names.extend(layer_names(children, path + "/"))
        return names

    return {
        "layers": layer_names(document.layers),
        "tilesets": [ts.name for ts in document.tilesets],
        "portals": [
            (obj.id, obj.name, obj.get_property("targetMap"), obj.get_property("targetSpawn"))
            for obj in find_portal_objects(document)
        ],
        "spawns": [(obj.id, obj.name) for obj in find_spawn_objects(document)],
    }
