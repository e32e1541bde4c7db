# Purpose: Cross-process file I/O for the local bond store.
# Every read and write holds a sibling ".lock" file; writes land in a temporary file that
# replaces the target with os.replace(), so readers see either the old or the new document.

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

from filelock import FileLock, Timeout

_logger = logging.getLogger(__name__)

# Lock wait limits in seconds, overridable per deployment
READ_TIMEOUT_DEFAULT: float = float(os.getenv("BOND_FILELOCK_READ_TIMEOUT", "15"))
WRITE_TIMEOUT_DEFAULT: float = float(os.getenv("BOND_FILELOCK_WRITE_TIMEOUT", "30"))


def _lockfile_for(path: Path) -> Path:
    """store.json -> store.json.lock"""
    return path.with_suffix(path.suffix + ".lock")


@contextmanager
def _locked(target: Path, timeout: float, purpose: str) -> Iterator[None]:
    try:
        with FileLock(str(_lockfile_for(target)), timeout=timeout):
            yield
    except Timeout as e:
        _logger.error(f"Timeout acquiring {purpose} lock for {target}: {e}")
        raise


# The helpers below expect the caller to hold the target's lock


def _replace_text(target: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f"{target.name}.tmp-")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, target)
    finally:
        # Only still present when the replace did not happen
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def _load_json(target: Path, default: Any) -> Any:
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        _logger.warning(f"Ignoring malformed JSON in {target}: {e}")
        return default


def _dump_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def read_text_locked(path: str | os.PathLike, *, timeout: float = READ_TIMEOUT_DEFAULT) -> str:
    """Read a UTF-8 text file while holding its lock.

    Raises FileNotFoundError when the file does not exist.
    """
    target = Path(path)
    with _locked(target, timeout, "read"):
        return target.read_text(encoding="utf-8")


def write_text_locked(path: str | os.PathLike, text: str, *, timeout: float = WRITE_TIMEOUT_DEFAULT) -> None:
    """Replace a text file's content atomically while holding its lock."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with _locked(target, timeout, "write"):
        _replace_text(target, text)


def read_json_locked(path: str | os.PathLike, default: Any = None, *, timeout: float = READ_TIMEOUT_DEFAULT) -> Any:
    """Decode a JSON file under its lock; `default` when missing or malformed."""
    target = Path(path)
    with _locked(target, timeout, "read"):
        return _load_json(target, default)


def write_json_locked(path: str | os.PathLike, data: Any, *, timeout: float = WRITE_TIMEOUT_DEFAULT) -> None:
    write_text_locked(path, _dump_json(data), timeout=timeout)


def update_json_locked(
    path: str | os.PathLike,
    update: Callable[[Any], Any],
    default: Any = None,
    *,
    timeout: float = WRITE_TIMEOUT_DEFAULT,
) -> Any:
    """Read-modify-write a JSON file as one transaction.

    The lock is held from the read through the atomic replace, so concurrent
    updates are serialised instead of overwriting each other. `update` gets the
    current document (`default` when missing or malformed) and returns the new
    one, which is written and returned.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with _locked(target, timeout, "update"):
        data = update(_load_json(target, default))
        _replace_text(target, _dump_json(data))
    return data


__all__ = [
    "read_text_locked",
    "write_text_locked",
    "read_json_locked",
    "write_json_locked",
    "update_json_locked",
]
