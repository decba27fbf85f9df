"""Variant classification and swapping.

This package provides:
- VariantManager: Owns the installed-variant state, classifies and swaps
- VariantState: STEAMVR / OPENCOMPOSITE / UNKNOWN / MISSING
- DriftDetected: Warning raised when the target changed behind our back
- file_hash: Whole-file digest used for classification
"""
from .hashing import file_hash, hashes_match, HASH_ALGORITHM
from .manager import (
    VariantManager,
    VariantState,
    DriftDetected,
    SwapOutcome,
    SwapResult,
    install_file,
)

__all__ = [
    "file_hash",
    "hashes_match",
    "HASH_ALGORITHM",
    "VariantManager",
    "VariantState",
    "DriftDetected",
    "SwapOutcome",
    "SwapResult",
    "install_file",
]
