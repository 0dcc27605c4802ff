"""Export sink writing each session to its own file."""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from sinks.base import ExportSink
from utils.errors import SinkError

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


class DirectorySink(ExportSink):
    """Writes every entry as ``<base>/<name>``, replacing existing files."""

    def __init__(self, base: Union[str, Path] = "."):
        super().__init__()
        self.base = Path(base)

    @property
    def location(self) -> str:
        return str(self.base)

    @contextmanager
    def begin_entry(self, name: str) -> Iterator[BinaryIO]:
        path = self.base / name
        # An existing file is only replaced once the entry is complete
        part = self.base / f".{name}{PART_SUFFIX}"
        try:
            handle = open(part, "wb")
        except OSError as e:
            raise SinkError(f"cannot create {path}: {e}") from e

        try:
            with handle:
                yield handle
            os.replace(part, path)
        except OSError as e:
            self._remove(part)
            raise SinkError(f"failed writing {path}: {e}") from e
        except BaseException:
            self._remove(part)
            raise

        if name not in self._entries:
            self._entries.append(name)
        logger.debug(f"Wrote {path}")

    def close(self):
        pass

    def discard(self):
        for name in self._entries:
            self._remove(self.base / name)
        logger.info(f"Removed {len(self._entries)} partially exported files from {self.base}")
        self._entries.clear()

    @staticmethod
    def _remove(path: Path):
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
