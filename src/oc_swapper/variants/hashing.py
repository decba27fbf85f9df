"""Whole-file content hashing for variant classification.

MD5 is used for change detection only, so hashes recorded by earlier
versions of the tool keep matching. It says nothing about integrity
against a deliberate attacker.
"""
import hashlib
from pathlib import Path

from ..errors import FileMissingError, FileReadError
from ..utils.logging_config import timed

HASH_ALGORITHM = "md5"
CHUNK_SIZE = 64 * 1024


@timed("hash")
def file_hash(path: Path) -> str:
    """Return the lower-case hex digest of the file at *path*.

    Raises:
        FileMissingError: the file does not exist
        FileReadError: the file exists but could not be read
    """
    digest = hashlib.new(HASH_ALGORITHM, usedforsecurity=False)
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except FileNotFoundError as e:
        raise FileMissingError(Path(path)) from e
    except OSError as e:
        raise FileReadError(Path(path), e.strerror or str(e)) from e
    return digest.hexdigest()


def hashes_match(expected: str, actual: str) -> bool:
    """Compare two hex digests, ignoring case and surrounding whitespace.

    An empty expected hash never matches anything.
    """
    expected = expected.strip().lower()
    return bool(expected) and expected == actual.strip().lower()
