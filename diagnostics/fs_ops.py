from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Union


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Write ``text`` to ``path`` so readers see either the old or the new file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        _replace(tmp_path, path)
    except BaseException:
        _discard(tmp_path)
        raise


def atomic_write_bytes(path: Path, data: Union[bytes, bytearray]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(bytes(data))
            handle.flush()
            os.fsync(handle.fileno())
        _replace(tmp_path, path)
    except BaseException:
        _discard(tmp_path)
        raise


def safe_unlink(path: Path) -> bool:
    """Remove a file with Windows-friendly permission handling. Returns False if absent."""
    path = Path(path)
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except PermissionError:
        _make_writable(path)
        path.unlink()
        return True


def _replace(src: Path, dst: Path) -> None:
    try:
        os.replace(src, dst)
    except PermissionError:
        # read-only target on Windows
        _make_writable(dst)
        os.replace(src, dst)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        pass


def _make_writable(path: Path) -> None:
    try:
        os.chmod(path, stat.S_IWRITE | stat.S_IREAD)
    except OSError:
        pass
    parent = path.parent
    try:
        os.chmod(parent, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    except OSError:
        pass
