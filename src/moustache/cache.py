"""Persistent cache of parsed templates.

A cache stores the node tree produced by the parser under the template's
class name (see `Engine.get_template_class_name`). A hit lets the engine skip
tokenizing and parsing; compiling the tree into render closures always
happens in-process, since closures cannot be persisted.

Stores:
- `FileSystemCache`: one pickle file per template in a directory
- `MemoryCache`: a plain dict, useful for tests and short-lived processes

Both implement ``load(key)``, ``dump(key, tree)``, ``clear()`` and
``stats()``.

File layout:
    ```
    <directory>/
    ├── Moustache_Template_<md5>.mtree
    └── ...
    ```

Writes are atomic: the tree is pickled into a temporary file in the cache
directory, renamed over the final name, then chmod'ed to the configured mode
(default ``0o666`` minus the process umask).

"""

from __future__ import annotations

import contextlib
import logging
import os
import pickle
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from moustache.environment.exceptions import CacheWriteError
from moustache.utils.logs import LoggerLike, log_event
from moustache.utils.logs import logger as default_logger

if TYPE_CHECKING:
    from moustache.nodes import Template as TemplateNode

CACHE_SUFFIX = ".mtree"


def _current_umask() -> int:
    # os.umask can only be read by setting it; restore immediately.
    mask = os.umask(0)
    os.umask(mask)
    return mask


class FileSystemCache:
    """Directory of pickled template trees.

    Example:
            >>> cache = FileSystemCache("/tmp/moustache-cache")
            >>> engine = Engine(cache=cache)
            >>> engine.render("Hello {{name}}", {"name": "World"})
            'Hello World'
            >>> cache.stats()["file_count"]
            1

    Args:
        directory: Cache directory, created on first write
        file_mode: Permission bits for cache files (default: ``0o666 & ~umask``,
            with the umask read once at construction)
        logger: Logger for cache events (default: the ``moustache`` logger)

    """

    __slots__ = ("_directory", "_file_mode", "_logger")

    def __init__(
        self,
        directory: str | os.PathLike[str],
        file_mode: int | None = None,
        logger: LoggerLike | None = None,
    ):
        self._directory = Path(directory)
        # Reading the umask briefly changes it process-wide, so do it once here.
        self._file_mode = file_mode if file_mode is not None else 0o666 & ~_current_umask()
        self._logger = logger if logger is not None else default_logger

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def file_mode(self) -> int:
        return self._file_mode

    def set_logger(self, logger: LoggerLike) -> None:
        self._logger = logger

    def filename(self, key: str) -> Path:
        """Return the cache file path for a key."""
        return self._directory / f"{key}{CACHE_SUFFIX}"

    def load(self, key: str) -> TemplateNode | None:
        """Load a cached tree.

        Returns:
            The tree, or None if missing or unreadable
        """
        path = self.filename(key)
        try:
            with path.open("rb") as f:
                return pickle.load(f)
        except FileNotFoundError:
            return None
        except (OSError, pickle.UnpicklingError, EOFError, AttributeError, ImportError):
            # Stale or corrupt entry; the caller recompiles and overwrites it.
            return None

    def dump(self, key: str, tree: TemplateNode) -> None:
        """Persist a tree.

        Raises:
            CacheWriteError: If the directory or file cannot be written
        """
        path = self.filename(key)
        self._ensure_directory()

        log_event(
            self._logger,
            logging.DEBUG,
            'Writing "%(class_name)s" to template cache: "%(filename)s"',
            class_name=key,
            filename=str(path),
        )

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=path.name + ".", suffix=".tmp", dir=self._directory
            )
        except OSError as e:
            raise CacheWriteError(f"Failed to write cache file '{path}': {e}", str(path)) from e

        try:
            with os.fdopen(fd, "wb") as f:
                pickle.dump(tree, f, protocol=pickle.HIGHEST_PROTOCOL)
        except (OSError, pickle.PicklingError) as e:
            with contextlib.suppress(OSError):
                os.unlink(temp_name)
            raise CacheWriteError(f"Failed to write cache file '{path}': {e}", str(path)) from e

        try:
            os.replace(temp_name, path)
        except OSError as e:
            log_event(
                self._logger,
                logging.ERROR,
                'Unable to rename temp cache file: "%(temp_name)s" -> "%(filename)s"',
                temp_name=temp_name,
                filename=str(path),
            )
            with contextlib.suppress(OSError):
                os.unlink(temp_name)
            raise CacheWriteError(f"Failed to write cache file '{path}': {e}", str(path)) from e

        with contextlib.suppress(OSError):
            os.chmod(path, self.file_mode)

    def _ensure_directory(self) -> None:
        if self._directory.is_dir():
            return
        log_event(
            self._logger,
            logging.INFO,
            'Creating template cache directory: "%(directory)s"',
            directory=str(self._directory),
        )
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheWriteError(
                f"Failed to create cache directory '{self._directory}': {e}", str(self._directory)
            ) from e

    def clear(self) -> int:
        """Remove all cache files.

        Returns:
            Number of files removed
        """
        removed = 0
        if not self._directory.is_dir():
            return removed
        for path in self._directory.glob(f"*{CACHE_SUFFIX}"):
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
                removed += 1
        return removed

    def stats(self) -> dict[str, int]:
        """Return ``{"file_count": n, "total_bytes": n}`` for the cache directory."""
        file_count = 0
        total_bytes = 0
        if self._directory.is_dir():
            for path in self._directory.glob(f"*{CACHE_SUFFIX}"):
                with contextlib.suppress(FileNotFoundError):
                    total_bytes += path.stat().st_size
                    file_count += 1
        return {"file_count": file_count, "total_bytes": total_bytes}

    def __repr__(self) -> str:
        return f"<FileSystemCache {str(self._directory)!r}>"


class MemoryCache:
    """In-process cache with the same interface as `FileSystemCache`."""

    __slots__ = ("_lock", "_trees")

    def __init__(self) -> None:
        self._trees: dict[str, Any] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> TemplateNode | None:
        return self._trees.get(key)

    def dump(self, key: str, tree: TemplateNode) -> None:
        with self._lock:
            self._trees[key] = tree

    def clear(self) -> int:
        with self._lock:
            removed = len(self._trees)
            self._trees.clear()
        return removed

    def stats(self) -> dict[str, int]:
        return {"file_count": len(self._trees), "total_bytes": 0}

    def __repr__(self) -> str:
        return f"<MemoryCache {len(self._trees)} entries>"
