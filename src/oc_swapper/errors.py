"""Exceptions raised by the config store and variant manager.

All of them are recoverable: the caller reports them and carries on.
"""
from pathlib import Path
from typing import Optional


class SwapperError(Exception):
    """Base class for every error the swapper reports to its caller."""


class ConfigParseError(SwapperError):
    """Raised when the config file exists but cannot be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error reading config file {path}: {reason}")


class ConfigWriteError(SwapperError):
    """Raised when the config file cannot be written.

    ``config`` holds the configuration that failed to persist, so a caller
    bootstrapping a fresh config can keep running with it in memory.
    """

    def __init__(self, path: Path, reason: str, config=None):
        self.path = path
        self.reason = reason
        self.config = config
        super().__init__(f"Error writing config file {path}: {reason}")


class ConfigIncompleteError(SwapperError):
    """Raised when a swap is attempted before every FILES entry is filled in."""

    def __init__(self, missing_keys: list[str]):
        self.missing_keys = missing_keys
        super().__init__(
            f"Config is incomplete, fill in: {', '.join(missing_keys)}"
        )


class FileReadError(SwapperError):
    """Raised when a file exists but cannot be hashed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error hashing {path}: {reason}")


class FileMissingError(SwapperError):
    """Raised when a file that must exist does not."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File not found: {path}")


class CopyFailedError(SwapperError):
    """Raised when installing a variant over the target fails.

    The target is left exactly as it was before the attempt.
    """

    def __init__(self, source: Path, target: Path, reason: str):
        self.source = source
        self.target = target
        self.reason = reason
        super().__init__(f"Error copying {source} to {target}: {reason}")


class UnknownVariantError(SwapperError):
    """Raised when swapping from a target that matches neither known hash."""

    def __init__(self, path: Path, digest: Optional[str] = None):
        self.path = path
        self.digest = digest
        detail = f" (hash {digest})" if digest else ""
        super().__init__(
            f"{path} matches neither the SteamVR nor the OpenComposite hash{detail}; "
            "refusing to guess which variant to install"
        )
