"""
Single and batch export of stamped photos
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, Protocol

from .errors import ExportInProgressError, PhotoReminisceError, SaveError
from .models import Photo, Position, StyleSettings, export_filename
from .renderer import RasterSurface, TimestampRenderer, decode_image

logger = logging.getLogger(__name__)

# Pause between batch items so the host's save mechanism is not flooded
DEFAULT_INTER_ITEM_DELAY = 0.1


class SaveSink(Protocol):
    """Persists an encoded export."""

    def save(self, data: bytes, filename: str) -> None:
        raise NotImplementedError


class DirectorySink:
    """Save exports into a directory, like a browser's download folder"""

    def __init__(self, output_dir: str | Path, overwrite_existing: bool = False):
        self.output_dir = Path(output_dir)
        self.overwrite_existing = overwrite_existing
        self.saved: list[Path] = []

    def save(self, data: bytes, filename: str) -> None:
        """Write to ``<name>.part`` first so a failed write never leaves a truncated export"""
        partial = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self._target_path(filename)
            partial = path.with_name(path.name + ".part")
            self._write(partial, data)
            partial.replace(path)
        except OSError as e:
            if partial is not None:
                partial.unlink(missing_ok=True)
            raise SaveError(f"Cannot save {filename}: {e}") from e
        self.saved.append(path)
        logger.info(f"Saved: {path}")

    @staticmethod
    def _write(path: Path, data: bytes):
        with open(path, 'wb') as f:
            f.write(data)

    def _target_path(self, filename: str) -> Path:
        """``name (1).jpg``, ``name (2).jpg``... when not overwriting"""
        path = self.output_dir / filename
        if self.overwrite_existing or not path.exists():
            return path
        stem, suffix = path.stem, path.suffix
        counter = 1
        while path.exists():
            path = self.output_dir / f"{stem} ({counter}){suffix}"
            counter += 1
        return path


@dataclass(frozen=True)
class ExportProgress:
    """Emitted after each batch item, whether it succeeded or not."""

    index: int
    total: int
    percent: int
    filename: str
    saved: bool
    error: str | None = None


@dataclass
class ExportSummary:
    total: int = 0
    saved: int = 0
    filenames: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def all_saved(self) -> bool:
        return self.saved == self.total


class BatchExporter:
    """
    Render, encode and save photos one at a time.

    Each run draws on its own offscreen surface so the interactive surface is
    never touched. Runs cannot overlap and cannot be cancelled.
    """

    def __init__(self, sink: SaveSink, renderer: TimestampRenderer | None = None,
                 inter_item_delay: float = DEFAULT_INTER_ITEM_DELAY,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], datetime] = datetime.now):
        self.sink = sink
        self.renderer = renderer or TimestampRenderer()
        self.inter_item_delay = inter_item_delay
        self.sleep = sleep
        self.clock = clock
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def export_one(self, photo: Photo, style: StyleSettings,
                   position: Position | None = None) -> str:
        """
        Export a single photo and return the saved filename.

        DecodeError, EncodeError and SaveError propagate to the caller; nothing
        is saved unless encoding succeeded.
        """
        self._start()
        try:
            return self._export_photo(RasterSurface(), photo, style, position)
        finally:
            self._running = False

    def iter_export(self, photos: Iterable[Photo], style: StyleSettings,
                    position: Position | None = None) -> Iterator[ExportProgress]:
        """Export ``photos`` in order, yielding one progress event per photo"""
        photos = list(photos)
        self._start()
        try:
            total = len(photos)
            surface = RasterSurface()
            logger.info(f"Batch export started: {total} photo(s)")

            for i, photo in enumerate(photos):
                error = None
                filename = photo.filename
                try:
                    filename = self._export_photo(surface, photo, style, position)
                except PhotoReminisceError as e:
                    error = str(e)
                    logger.error(f"Export failed [{photo.filename}]: {e}")
                except Exception as e:
                    error = str(e) or type(e).__name__
                    logger.exception(f"Unexpected export failure [{photo.filename}]")

                done = i + 1
                yield ExportProgress(
                    index=i,
                    total=total,
                    percent=round(done / total * 100),
                    filename=filename,
                    saved=error is None,
                    error=error,
                )

                if done < total and self.inter_item_delay > 0:
                    self.sleep(self.inter_item_delay)
        finally:
            self._running = False

    def export_all(self, photos: Iterable[Photo], style: StyleSettings,
                   position: Position | None = None,
                   progress_callback: Callable[[ExportProgress], None] | None = None) -> ExportSummary:
        """Run a whole batch, tolerating per-photo failures"""
        photos = list(photos)
        summary = ExportSummary(total=len(photos))

        for progress in self.iter_export(photos, style, position):
            if progress.saved:
                summary.saved += 1
                summary.filenames.append(progress.filename)
            else:
                summary.failed.append((progress.filename, progress.error or ""))
            if progress_callback:
                progress_callback(progress)

        logger.info(f"Batch export finished: saved {summary.saved}, failed {len(summary.failed)}")
        return summary

    def _start(self):
        if self._running:
            raise ExportInProgressError("An export is already running")
        self._running = True

    def _export_photo(self, surface: RasterSurface, photo: Photo, style: StyleSettings,
                      position: Position | None) -> str:
        image = decode_image(photo.data)
        date = photo.capture_date or self.clock()

        self.renderer.render_placed(surface, image, date, style, position)

        data = surface.encode(style.file_type, style.quality)
        filename = export_filename(photo.filename, style.file_type)
        try:
            self.sink.save(data, filename)
        except SaveError:
            raise
        except Exception as e:
            raise SaveError(f"Cannot save {filename}: {e}") from e

        logger.info(f"Exported: {photo.filename} -> {filename}")
        return filename
