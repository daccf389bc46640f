"""Concurrent file writer with backups and per-file failure isolation."""

import asyncio
import logging
import resource
import shutil
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..config import settings
from ..errors import FileWriteError
from ..generators import GeneratedFile

logger = logging.getLogger(__name__)


def process_memory_mb() -> float:
    """Peak resident memory of this process in megabytes."""
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    if sys.platform == "darwin":
        return usage / (1024 * 1024)
    return usage / 1024


@dataclass
class WriteReport:
    """Outcome of one write_files call."""

    written: int = 0
    written_paths: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def backup_path_for(path: Path, timestamp_ms: Optional[int] = None) -> Path:
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return path.with_name(f"{path.name}.backup.{timestamp_ms}")


def write_with_backup(path: Path, content: str) -> Optional[Path]:
    """
    Write a file, first copying any existing file to a timestamped backup.

    Returns:
        The backup path, or None if nothing was overwritten
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    backup = None
    if path.exists():
        backup = backup_path_for(path)
        shutil.copy2(path, backup)
    path.write_text(content, encoding="utf-8")
    return backup


class FileWriter:
    """Writes rendered files under a root with adaptive concurrency."""

    def __init__(
        self,
        root: Union[str, Path],
        memory_sampler: Callable[[], float] = process_memory_mb,
        max_concurrency: Optional[int] = None,
        min_concurrency: Optional[int] = None,
        memory_threshold_mb: Optional[float] = None,
    ):
        self.root = Path(root)
        self.memory_sampler = memory_sampler
        self.max_concurrency = max_concurrency or settings.sync_max_concurrency
        self.min_concurrency = min_concurrency or settings.sync_min_concurrency
        self.memory_threshold_mb = memory_threshold_mb or settings.sync_memory_threshold_mb

    def concurrency_for(self, file_count: int) -> int:
        """
        Pick the batch size for a write run.

        Starts at min(max_concurrency, file_count) and backs off when the
        process is above the memory threshold.
        """
        base = max(1, min(self.max_concurrency, file_count))
        memory_mb = self.memory_sampler()
        if memory_mb > self.memory_threshold_mb:
            reduced = max(self.min_concurrency, base - settings.sync_concurrency_reduction)
            logger.warning(
                f"Memory at {memory_mb:.0f}MB, reducing write concurrency from {base} to {reduced}"
            )
            return reduced
        return base

    async def _write_one(self, file: GeneratedFile) -> str:
        target = self.root / file.path
        try:
            backup = await asyncio.to_thread(write_with_backup, target, file.content)
        except OSError as e:
            raise FileWriteError(file.path, str(e)) from e
        if backup is not None:
            logger.info(f"Backed up {file.path} to {backup.name}")
        return file.path

    async def write_files(self, files: Sequence[GeneratedFile]) -> WriteReport:
        """
        Write every file, collecting failures instead of raising.

        Args:
            files: Rendered files with paths relative to the root

        Returns:
            WriteReport with written paths and one error per failed file
        """
        report = WriteReport()
        if not files:
            return report

        batch_size = self.concurrency_for(len(files))
        pause = len(files) > settings.sync_batch_pause_threshold

        for start in range(0, len(files), batch_size):
            batch = files[start:start + batch_size]
            outcomes = await asyncio.gather(
                *(self._write_one(file) for file in batch), return_exceptions=True
            )
            for file, outcome in zip(batch, outcomes):
                if isinstance(outcome, FileWriteError):
                    logger.error(f"Failed to write {outcome.message}")
                    report.errors.append(outcome.message)
                elif isinstance(outcome, Exception):
                    logger.error(f"Failed to write {file.path}: {outcome}")
                    report.errors.append(f"{file.path}: {outcome}")
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    report.written += 1
                    report.written_paths.append(outcome)

            if pause and start + batch_size < len(files):
                await asyncio.sleep(settings.sync_batch_pause_ms / 1000)

        return report
