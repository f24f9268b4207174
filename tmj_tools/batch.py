"""
Per-file batch processing

Each map file is handled on its own: load -> job -> save. A structural or
I/O problem in one file is recorded for that file and the run moves on to
the next one; the report's exit code is non-zero if any file failed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Type, Union

from tmj_manager import TiledMap
from .config import DEFAULTS, ToolConfig
from .contract import check_consumer_contract, has_errors, WARNING
from .errors import MapToolsError, MissingTileset, UnsupportedMapKind
from .rotation import rotate_map
from .transform.direction import Direction
from .transform.objects import AliasPairs
from .variants import assign_variants, is_floor_layer

logger = logging.getLogger(__name__)


# =============================================================================
# FILE DISCOVERY
# =============================================================================

def discover_map_files(directories: Iterable[Union[str, Path]]) -> List[Path]:
    """
    *.json files directly inside each directory (case-insensitive suffix).

    Missing directories are ignored; files reachable from two directories
    are listed once.
    """
    seen = set()
    files = []
    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            continue
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.suffix.lower() != ".json":
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(path)
    return files


def resolve_targets(paths: Sequence[Union[str, Path]], root: Path,
                    config: ToolConfig = DEFAULTS) -> List[Path]:
    """Explicit paths (relative ones against `root`), else the configured map dirs."""
    if paths:
        return [Path(p) if Path(p).is_absolute() else root / p for p in paths]
    return discover_map_files(config.map_paths(root))


# =============================================================================
# JOBS
# =============================================================================

@dataclass
class JobOutcome:
    document: TiledMap
    message: str = ""
    changed: int = 0
    ok: bool = True


class MapJob:
    """One operation applied to each map of a batch."""

    writes = True
    # Errors that mean "nothing to do for this file" rather than failure
    skip_errors: Tuple[Type[BaseException], ...] = ()

    def run(self, document: TiledMap) -> JobOutcome:
        raise NotImplementedError

    def status_line(self, path_text: str, outcome: JobOutcome) -> str:
        return f"{path_text} ({outcome.message})"


@dataclass
class RotateJob(MapJob):
    direction: Direction = Direction.CLOCKWISE
    turns: int = 1
    aliases: AliasPairs = DEFAULTS.property_aliases

    def run(self, document: TiledMap) -> JobOutcome:
        rotated = rotate_map(document, self.direction, self.turns, self.aliases)
        return JobOutcome(rotated, f"new {rotated.width}x{rotated.height}")

    def status_line(self, path_text: str, outcome: JobOutcome) -> str:
        return f"Rotated {path_text} ({outcome.message})"


@dataclass
class VariantJob(MapJob):
    variant_count: int = DEFAULTS.variant_count
    tileset_name: Optional[str] = None
    floor_keywords: Tuple[str, ...] = DEFAULTS.floor_keywords

    skip_errors = (UnsupportedMapKind, MissingTileset)

    def run(self, document: TiledMap) -> JobOutcome:
        changed = assign_variants(
            document,
            lambda name: is_floor_layer(name, self.floor_keywords),
            self.variant_count,
            self.tileset_name,
        )
        return JobOutcome(document, f"{changed} tiles", changed)

    def status_line(self, path_text: str, outcome: JobOutcome) -> str:
        return f"Updated floor variants: {path_text} ({outcome.message})"


@dataclass
class CheckJob(MapJob):
    expected_tileset: str = DEFAULTS.expected_tileset

    writes = False

    def run(self, document: TiledMap) -> JobOutcome:
        issues = check_consumer_contract(document, self.expected_tileset)
        for issue in issues:
            if issue.severity == WARNING:
                logger.warning("%s", issue.message)
        message = "; ".join(str(issue) for issue in issues) or "ok"
        return JobOutcome(document, message, len(issues), ok=not has_errors(issues))

    def status_line(self, path_text: str, outcome: JobOutcome) -> str:
        return f"Checked {path_text} ({outcome.message})"


# =============================================================================
# BATCH RUNNER
# =============================================================================

class FileStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileResult:
    path: Path
    status: FileStatus
    message: str = ""
    changed: int = 0
    outcome: Optional[JobOutcome] = None


@dataclass
class BatchReport:
    results: List[FileResult] = field(default_factory=list)

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if r.status is FileStatus.FAILED]

    @property
    def skipped(self) -> List[FileResult]:
        return [r for r in self.results if r.status is FileStatus.SKIPPED]

    @property
    def succeeded(self) -> List[FileResult]:
        return [r for r in self.results if r.status is FileStatus.OK]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


def process_file(path: Union[str, Path], job: MapJob, write: bool = True) -> FileResult:
    """Run `job` on one map file, recording instead of raising map errors."""
    path = Path(path)
    try:
        document = TiledMap.load(path)
        outcome = job.run(document)
        if not outcome.ok:
            return FileResult(path, FileStatus.FAILED, f"{path}: {outcome.message}",
                              outcome.changed, outcome)
        if write and job.writes:
            outcome.document.save(path)
            logger.info("Wrote %s", path)
    except job.skip_errors as e:
        logger.warning("Skipping %s: %s", path.name, e)
        return FileResult(path, FileStatus.SKIPPED, str(e))
    except MapToolsError as e:
        logger.error("%s: %s", path, e)
        return FileResult(path, FileStatus.FAILED, f"{path}: {e}")
    return FileResult(path, FileStatus.OK, outcome.message, outcome.changed, outcome)


def run_batch(paths: Iterable[Union[str, Path]], job: MapJob, write: bool = True) -> BatchReport:
    report = BatchReport()
    for path in paths:
        report.results.append(process_file(path, job, write))
    return report
