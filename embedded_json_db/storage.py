from __future__ import annotations
import json
import logging
import os
import tempfile
from typing import Any, Dict, Protocol

from .errors import IOCorruptionError, StorageIOError
from .utils import dump_document, empty_document

logger = logging.getLogger(__name__)


class PersistenceBackend(Protocol):
    """What Database needs from durable storage of the serialized document."""

    def exists(self) -> bool: ...

    def create_empty(self) -> None: ...

    def load(self) -> Dict[str, Any]: ...

    def save(self, document: Dict[str, Any]) -> None: ...


def _reject_constant(name: str) -> Any:
    # NaN and Infinity load in Python but can never be written back
    raise ValueError(f"non-standard JSON constant {name}")


class FileStorage:
    """
    Single JSON file holding the whole document. Every save rewrites the file
    through a temp file in the same directory and an atomic os.replace.
    """
    def __init__(self, path: str, *, indent: int | None = 2, fsync: bool = True) -> None:
        self.path = path
        self.indent = indent
        self.fsync = fsync

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def create_empty(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as exc:
                raise StorageIOError(f'The directory "{parent}" cannot be created: {exc}') from exc
        logger.debug("initializing empty database file %s", self.path)
        self.save(empty_document())

    def load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as exc:
            raise StorageIOError(f'The file "{self.path}" cannot be read: {exc}') from exc
        except UnicodeDecodeError as exc:
            raise IOCorruptionError(f'The file "{self.path}" is not UTF-8 text: {exc}') from exc
        if not text.strip():
            logger.debug("database file %s is blank; rewriting empty document", self.path)
            doc = empty_document()
            self.save(doc)
            return doc
        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise IOCorruptionError(f'The file "{self.path}" is not valid JSON: {exc}') from exc

    def save(self, document: Dict[str, Any]) -> None:
        try:
            data = dump_document(document, self.indent)
        except (TypeError, ValueError) as exc:
            raise StorageIOError(f"The document cannot be serialized: {exc}") from exc
        directory = os.path.dirname(os.path.abspath(self.path))
        base = os.path.basename(self.path)
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=directory)
        except OSError as exc:
            logger.error("cannot create temp file next to %s: %s", self.path, exc)
            raise StorageIOError(f'The file "{self.path}" cannot be written: {exc}') from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
            self.replace_file(tmp_path)
        except OSError as exc:
            logger.error("writing %s failed: %s", self.path, exc)
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise StorageIOError(f'The file "{self.path}" cannot be written: {exc}') from exc
        logger.debug("wrote %d bytes to %s", len(data), self.path)

    def replace_file(self, tmp_path: str) -> None:
        os.replace(tmp_path, self.path)
        if self.fsync and hasattr(os, "O_DIRECTORY"):
            self._fsync_dir()

    def _fsync_dir(self) -> None:
        # The new file is already in place; a failed directory sync only weakens durability
        try:
            dir_fd = os.open(os.path.dirname(os.path.abspath(self.path)), os.O_RDONLY | os.O_DIRECTORY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError as exc:
            logger.warning("directory fsync after writing %s failed: %s", self.path, exc)
