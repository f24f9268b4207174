import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class ToolConfig:
    """Runtime configuration for the map tools.

    Map directories are relative to the project root given on the command
    line (the current directory by default).
    """

    # Scanned for *.json maps when no paths are given
    map_dirs: Tuple[str, ...] = (
        "client/public/maps",
        "client/public/assets/maps/floors",
    )

    # Floor variants
    variant_count: int = 8
    floor_keywords: Tuple[str, ...] = ("floor", "ground")

    # Tileset name the game client looks up
    expected_tileset: str = "neumont_tileset_32"

    # Property names kept in sync on every transformed object
    property_aliases: Tuple[Tuple[str, str], ...] = (("targetMap", "targetFloor"),)

    def map_paths(self, root: Path) -> Tuple[Path, ...]:
        return tuple(root / directory for directory in self.map_dirs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolConfig":
        """Defaults overridden by TMJ_TOOLS_* environment variables."""
        environ = os.environ if environ is None else environ
        config = cls()

        map_dirs = environ.get("TMJ_TOOLS_MAP_DIRS")
        if map_dirs:
            config = replace(config, map_dirs=tuple(
                part for part in map_dirs.split(os.pathsep) if part
            ))

        variant_count = environ.get("TMJ_TOOLS_VARIANT_COUNT")
        if variant_count:
            try:
                count = int(variant_count)
            except ValueError:
                raise ValueError(
                    f"TMJ_TOOLS_VARIANT_COUNT must be an integer, got {variant_count!r}"
                ) from None
            config = replace(config, variant_count=count)

        tileset = environ.get("TMJ_TOOLS_TILESET")
        if tileset:
            config = replace(config, expected_tileset=tileset)

        return config


DEFAULTS = ToolConfig()
