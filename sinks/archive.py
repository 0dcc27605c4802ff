"""Export sink writing all sessions into one zip archive."""

import logging
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, BinaryIO, Iterator, Optional, Union

from config.settings import ARCHIVE_COMPRESSION
from sinks.base import ExportSink
from utils.errors import SinkError

logger = logging.getLogger(__name__)


class ArchiveSink(ExportSink):
    """Writes every entry as a member of a single zip archive.

    The archive writer is owned exclusively by the sink and accepts one open
    member at a time; beginning a new entry finalizes the previous one.
    """

    def __init__(self, path: Union[str, Path], compression: int = ARCHIVE_COMPRESSION):
        super().__init__()
        self.path = Path(path)
        self.compression = compression
        try:
            self._archive: Optional[zipfile.ZipFile] = zipfile.ZipFile(self.path, "w", compression=compression)
        except OSError as e:
            raise SinkError(f"cannot create archive {self.path}: {e}") from e
        self._open_entry: Optional[IO[bytes]] = None

    @property
    def location(self) -> str:
        return str(self.path)

    @property
    def closed(self) -> bool:
        return self._archive is None

    @contextmanager
    def begin_entry(self, name: str) -> Iterator[BinaryIO]:
        if self.closed:
            raise SinkError(f"archive {self.path} is already closed")
        if name in self._entries:
            raise SinkError(f"duplicate entry '{name}' in archive {self.path}")

        self._finish_entry()
        try:
            self._open_entry = self._archive.open(name, "w", force_zip64=True)
        except (OSError, ValueError, RuntimeError, zipfile.BadZipFile) as e:
            raise SinkError(f"cannot add entry '{name}' to {self.path}: {e}") from e
        self._entries.append(name)

        try:
            yield self._open_entry
        except (OSError, ValueError, RuntimeError) as e:
            raise SinkError(f"failed writing entry '{name}' to {self.path}: {e}") from e
        finally:
            self._finish_entry()
        logger.debug(f"Added {name} to {self.path}")

    def _finish_entry(self):
        entry, self._open_entry = self._open_entry, None
        if entry is None:
            return
        try:
            entry.close()
        except (OSError, RuntimeError) as e:
            raise SinkError(f"failed to finalize entry in {self.path}: {e}") from e

    def close(self):
        if self.closed:
            return
        try:
            self._finish_entry()
        finally:
            archive, self._archive = self._archive, None
            try:
                archive.close()
            except OSError as e:
                raise SinkError(f"failed to finalize archive {self.path}: {e}") from e
        logger.info(f"Archive {self.path} written with {len(self._entries)} entries")

    def discard(self):
        try:
            self.close()
        except SinkError as e:
            logger.warning(f"Ignoring error while closing discarded archive: {e}")
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        logger.info(f"Removed partial archive {self.path}")
        self._entries.clear()
