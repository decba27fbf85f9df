"""Atomic write helpers (temp + fsync + replace).

The destination is either left untouched or fully replaced; a crash or a
failed copy never leaves a half-written config file or a missing DLL.
"""
import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def _fsync_dir(path: Path) -> None:
    # Directories cannot be opened for fsync on Windows
    try:
        fd = os.open(str(path), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def _temp_path_for(path: Path) -> Path:
    fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    os.close(fd)
    return Path(name)


def _default_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _apply_mode(tmp_path: Path, path: Path, mode: int) -> None:
    # mkstemp creates 0600; keep the destination's mode when replacing it
    if path.exists():
        shutil.copymode(path, tmp_path)
    else:
        os.chmod(tmp_path, mode)


def _replace(tmp_path: Path, path: Path) -> None:
    try:
        os.replace(str(tmp_path), str(path))
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    _fsync_dir(path.parent)


def atomic_write_text(path: Path, text: str) -> None:
    """Write *text* to *path* via a temp file in the same directory.

    An existing *path* keeps its permission bits; a new one gets the
    umask default.
    """
    path = Path(path)
    tmp_path = _temp_path_for(path)
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        _apply_mode(tmp_path, path, _default_mode())
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    _replace(tmp_path, path)


def atomic_copy(src: Path, dst: Path) -> None:
    """Copy *src* over *dst* without ever leaving *dst* absent.

    The source is copied to a temp file beside *dst* first, then moved into
    place with a single ``os.replace``. *dst*'s directory must exist. An
    existing *dst* keeps its permission bits; a new one takes *src*'s.
    """
    src = Path(src)
    dst = Path(dst)
    tmp_path = _temp_path_for(dst)
    try:
        shutil.copyfile(src, tmp_path)
        with open(tmp_path, "rb+") as handle:
            os.fsync(handle.fileno())
        _apply_mode(tmp_path, dst, stat.S_IMODE(src.stat().st_mode))
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    _replace(tmp_path, dst)
    logger.debug(f"Replaced {dst} with copy of {src}")
