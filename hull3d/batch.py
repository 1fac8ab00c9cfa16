"""
Hulls for many point sets at once.

Provides:
- compute_hulls: in-memory point sets, sequential or in a thread pool
- batch_convert: every point file in a directory -> hull files
- per-item results that record failures without stopping the batch

Each build owns its state, so builds never share anything and can run in
parallel threads. A shared ``threading.Event`` cancels builds still running.

Usage:
    from hull3d.batch import batch_convert

    result = batch_convert("./clouds", "./hulls", pattern="*.xyz", parallel=True)
    print(result.summary())
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from hull3d.config import HullConfig, load_config
from hull3d.hull.convex_hull import ConvexHull
from hull3d.io.point_io import PointFormat, load_points, save_hull

logger = logging.getLogger(__name__)

# Placeholder file name so config lookup searches the input directory itself.
CONFIG_ANCHOR = "points"


@dataclass
class HullResult:
    """Outcome of one hull build."""
    name: str
    faces: Optional[NDArray[np.int32]] = None
    output_path: Optional[Path] = None
    success: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def status(self) -> str:
        return "OK" if self.success else "FAILED"

    @property
    def n_faces(self) -> int:
        return 0 if self.faces is None else int(len(self.faces))


@dataclass
class BatchResult:
    """Outcome of a batch of hull builds."""
    results: List[HullResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    def summary(self) -> str:
        lines = [
            "Batch Hull Summary",
            "=" * 40,
            f"Total sets:      {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Total time:      {self.total_duration_seconds:.2f}s",
            "",
        ]
        if self.failed > 0:
            lines.append("Failed sets:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.name}: {r.error}")
        return "\n".join(lines)

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'name': r.name,
                    'output': str(r.output_path) if r.output_path else None,
                    'success': r.success,
                    'n_faces': r.n_faces,
                    'error': r.error,
                    'duration': r.duration_seconds,
                }
                for r in self.results
            ],
        }


def build_one(
    name: str,
    points: ArrayLike,
    config: Optional[HullConfig] = None,
    cancel_event: Optional[threading.Event] = None,
    output_path: Optional[Path] = None,
) -> HullResult:
    """Build one hull, capturing any failure in the result."""
    start = time.perf_counter()
    result = HullResult(name=name)

    try:
        hull = ConvexHull(points, config=config, cancel_event=cancel_event)
        result.faces = hull.faces
        if output_path is not None:
            fmt = PointFormat(config.output.format) if config else None
            result.output_path = save_hull(hull.points, result.faces, output_path, fmt)
        result.success = True
    except Exception as e:
        result.error = str(e)
        result.error_type = type(e).__name__
        logger.error("Failed to build hull for %s: %s", name, e)

    result.duration_seconds = time.perf_counter() - start
    return result


def _run(
    jobs: List[Callable[[], HullResult]],
    parallel: bool,
    max_workers: Optional[int],
    progress_callback: Optional[Callable[[int, int, HullResult], None]],
) -> List[HullResult]:
    results: List[HullResult] = []
    total = len(jobs)

    def report(i: int, result: HullResult) -> None:
        results.append(result)
        if progress_callback:
            progress_callback(i, total, result)
        logger.info("[%d/%d] %s: %s (%.3fs)", i, total, result.name,
                    result.status, result.duration_seconds)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(job) for job in jobs]
            for i, future in enumerate(as_completed(futures), 1):
                report(i, future.result())
    else:
        for i, job in enumerate(jobs, 1):
            report(i, job())

    return results


def compute_hulls(
    point_sets: Union[Sequence[ArrayLike], Dict[str, ArrayLike]],
    config: Optional[HullConfig] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[int, int, HullResult], None]] = None,
) -> BatchResult:
    """Build hulls for many in-memory point sets.

    Args:
        point_sets: Sequence of (N, 3) arrays (named by position) or a name -> array dict
        config: Shared configuration
        parallel: Use a thread pool
        max_workers: Thread pool size (None = executor default)
        cancel_event: Shared cancellation event
        progress_callback: Called after each build with (current, total, result)

    Returns:
        BatchResult; in parallel mode results are in completion order
    """
    start = time.perf_counter()
    items = point_sets.items() if isinstance(point_sets, dict) else (
        (str(i), pts) for i, pts in enumerate(point_sets)
    )
    jobs = [
        (lambda n=name, p=pts: build_one(n, p, config, cancel_event))
        for name, pts in items
    ]

    results = _run(jobs, parallel, max_workers, progress_callback)
    batch = BatchResult(results=results, total_duration_seconds=time.perf_counter() - start)
    logger.info("Batch complete: %d/%d hulls built in %.2fs",
                batch.successful, batch.total, batch.total_duration_seconds)
    return batch


def find_point_files(
    input_dir: Union[str, Path],
    pattern: str = "*.xyz",
    recursive: bool = False,
) -> List[Path]:
    """Sorted point files in ``input_dir`` matching ``pattern``."""
    input_dir = Path(input_dir)
    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    files = input_dir.rglob(pattern) if recursive else input_dir.glob(pattern)
    found = sorted(set(f for f in files if f.is_file()))
    logger.info("Found %d point files in %s", len(found), input_dir)
    return found


def _convert_file(
    input_path: Path,
    output_path: Path,
    config: HullConfig,
    cancel_event: Optional[threading.Event],
) -> HullResult:
    start = time.perf_counter()
    try:
        points = load_points(input_path)
    except Exception as e:
        logger.error("Failed to load %s: %s", input_path.name, e)
        return HullResult(
            name=input_path.name, error=str(e), error_type=type(e).__name__,
            duration_seconds=time.perf_counter() - start,
        )
    return build_one(input_path.name, points, config, cancel_event, output_path)


def batch_convert(
    input_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    pattern: str = "*.xyz",
    recursive: bool = False,
    config: Optional[HullConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[int, int, HullResult], None]] = None,
) -> BatchResult:
    """Compute and save hulls for every matching point file in a directory.

    Output files are named ``<stem><output.suffix>.<output.format>``.
    """
    start = time.perf_counter()
    input_dir = Path(input_dir)

    if config is None:
        config = load_config(input_path=input_dir / CONFIG_ANCHOR, explicit_config=config_path)

    output_dir = Path(output_dir or config.output.output_dir or input_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    files = find_point_files(input_dir, pattern, recursive)
    if not files:
        logger.warning("No point files found in %s", input_dir)
        return BatchResult(total_duration_seconds=time.perf_counter() - start)

    suffix = config.output.suffix
    ext = config.output.format
    jobs = [
        (lambda f=f: _convert_file(f, output_dir / f"{f.stem}{suffix}.{ext}", config, cancel_event))
        for f in files
    ]

    logger.info("Starting batch: %d files, parallel=%s", len(files), parallel)
    results = _run(jobs, parallel, max_workers, progress_callback)
    batch = BatchResult(results=results, total_duration_seconds=time.perf_counter() - start)
    logger.info(
        "Batch complete: %d/%d successful (%.1f%%) in %.2fs",
        batch.successful, batch.total, batch.success_rate, batch.total_duration_seconds,
    )
    return batch
