"""Repository base class used by all concrete repositories."""
import json
import logging
import os
import tempfile
from typing import Any


class BaseRepository:
    """Provides JSON-backed persistence for a single data file.

    Sub-classes call :meth:`_load` to read data from disk and :meth:`_save`
    to atomically persist it back.  Unlike the stores built on top of it, the
    repository keeps no in-memory state of its own.

    The atomic write uses a write-then-rename strategy so the file is never
    left in a partially-written state.  Keys are sorted so the same data
    always produces the same bytes.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._log = logging.getLogger(f'grindom.repository.{type(self).__name__}')

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.exists(self._path)

    def _load(self, default: Any) -> Any:
        """Load JSON from *self._path*, returning *default* on missing/corrupt file."""
        if os.path.exists(self._path):
            try:
                with open(self._path, 'r', encoding='utf-8') as fh:
                    return json.load(fh)
            except (OSError, ValueError) as exc:
                self._log.warning("Could not load %s: %s", self._path, exc)
        return default

    def _save(self, data: Any) -> None:
        """Atomically write *data* as JSON to *self._path*.

        The parent directory is created private (0700) when missing.

        Raises:
            OSError: If the directory, the temp file or the rename fails.
            TypeError: If *data* is not JSON-serialisable.
        """
        dir_name = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(dir_name, mode=0o700, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=dir_name, prefix=f'.{os.path.basename(self._path)}.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, indent=2, sort_keys=True, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _remove(self) -> bool:
        """Delete the backing file.  Returns ``True`` if it existed."""
        try:
            os.remove(self._path)
        except FileNotFoundError:
            self._log.info("Nothing to clear; %s does not exist.", self._path)
            return False
        except OSError as exc:
            self._log.error("Could not remove %s: %s", self._path, exc)
            return False
        return True
