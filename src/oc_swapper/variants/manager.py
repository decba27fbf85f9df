"""Variant classification and swapping.

The manager owns the only runtime state: which variant is believed to be
installed at the target path. That belief is never trusted on its own;
every swap re-hashes the target first and works from what it finds.

Known limitation: there is no locking. Two swapper instances pointed at
the same target can race each other.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config_store import Configuration
from ..errors import (
    CopyFailedError,
    FileMissingError,
    SwapperError,
    UnknownVariantError,
)
from ..utils.atomic_write import atomic_copy
from ..utils.audit_log import log_swap
from ..utils.logging_config import timed_section
from ..utils.retry import with_retry
from .hashing import file_hash, hashes_match

logger = logging.getLogger(__name__)


class VariantState(str, Enum):
    """What currently sits at the target path."""
    STEAMVR = "steamvr"              # variant A
    OPENCOMPOSITE = "opencomposite"  # variant B
    UNKNOWN = "unknown"              # present, matches neither hash
    MISSING = "missing"              # no file at the target path

    @property
    def is_variant(self) -> bool:
        return self in (VariantState.STEAMVR, VariantState.OPENCOMPOSITE)

    @property
    def other(self) -> "VariantState":
        """The variant a swap from this state installs."""
        if self is VariantState.STEAMVR:
            return VariantState.OPENCOMPOSITE
        if self is VariantState.OPENCOMPOSITE:
            return VariantState.STEAMVR
        raise ValueError(f"No counterpart for {self.value}")

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    VariantState.STEAMVR: "SteamVR",
    VariantState.OPENCOMPOSITE: "OpenComposite",
    VariantState.UNKNOWN: "unrecognised",
    VariantState.MISSING: "missing",
}


@dataclass(frozen=True)
class DriftDetected:
    """Warning: the target changed outside this tool since it was last seen."""
    target: Path
    expected: VariantState
    observed: VariantState

    @property
    def message(self) -> str:
        return (
            f"Something has changed {self.target.name} while the swapper was open: "
            f"expected {self.expected.label}, found {self.observed.label}"
        )

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class SwapOutcome:
    """A completed swap."""
    previous: VariantState
    state: VariantState
    drift: Optional[DriftDetected] = None


@dataclass(frozen=True)
class SwapResult:
    """Result of request_swap(); never raises, everything is reported here.

    ``state`` is None only when the target has never been hashed.
    """
    state: Optional[VariantState]
    warning: Optional[DriftDetected] = None
    error: Optional[SwapperError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@with_retry()
def install_file(source: Path, target: Path) -> None:
    """Copy *source* over *target* atomically, retrying while the target is locked."""
    atomic_copy(source, target)


class VariantManager:
    """Classifies the installed binary and swaps between the two variants.

    Usage:
        manager = VariantManager(ConfigStore().load())
        manager.initialize()
        result = manager.request_swap()
    """

    def __init__(self, config: Configuration):
        self.config = config
        # None until the target has been hashed at least once
        self._state: Optional[VariantState] = None
        self.last_digest: Optional[str] = None
        self.last_drift: Optional[DriftDetected] = None

    @property
    def target_path(self) -> Path:
        return self.config.target_path

    def storage_path(self, variant: VariantState) -> Path:
        if variant is VariantState.STEAMVR:
            return self.config.steamvr_storage_path
        if variant is VariantState.OPENCOMPOSITE:
            return self.config.opencomposite_storage_path
        raise ValueError(f"{variant.value} has no storage file")

    def get_current_state(self) -> Optional[VariantState]:
        """Last known state, None before the first classification.
        Does not touch the filesystem."""
        return self._state

    # === Classification ===

    def classify_digest(self, digest: str) -> VariantState:
        """Map a digest to a variant. SteamVR is checked first, so equal
        configured hashes always classify as SteamVR."""
        if hashes_match(self.config.steamvr_hash, digest):
            return VariantState.STEAMVR
        if hashes_match(self.config.opencomposite_hash, digest):
            return VariantState.OPENCOMPOSITE
        return VariantState.UNKNOWN

    def classify(self) -> VariantState:
        """Hash the target and classify it without changing the stored state.

        Raises:
            FileReadError: the target exists but could not be read
        """
        try:
            digest = file_hash(self.target_path)
        except FileMissingError:
            self.last_digest = None
            return VariantState.MISSING

        self.last_digest = digest
        state = self.classify_digest(digest)
        logger.debug(f"Classified {self.target_path} ({digest}) as {state.value}")
        return state

    def initialize(self) -> VariantState:
        """Classify the target at startup; install SteamVR if it is missing.

        Raises:
            FileReadError: the target could not be hashed
            ConfigIncompleteError: target missing and config not filled in
            CopyFailedError: the SteamVR file could not be installed
        """
        state = self.classify()

        if state is VariantState.MISSING:
            logger.warning(f"{self.target_path} not found, installing SteamVR binaries")
            self._state = VariantState.MISSING
            self.config.require_complete()
            self._install(VariantState.STEAMVR, operation="bootstrap")
        else:
            self._state = state

        logger.info(f"Currently using {self._state.label} binaries ({self.target_path})")
        return self._state

    # === Swapping ===

    def check_drift(self) -> tuple[VariantState, Optional[DriftDetected]]:
        """Re-hash the target and adopt what is actually there.

        Returns the observed state and a DriftDetected warning when it
        differs from the last known state. The first classification of a
        target never counts as drift.

        Raises:
            FileReadError: the target could not be hashed; state is unchanged
        """
        observed = self.classify()
        drift = None

        if self._state is not None and observed is not self._state:
            drift = DriftDetected(
                target=self.target_path,
                expected=self._state,
                observed=observed,
            )
            logger.warning(drift.message)

        self._state = observed
        self.last_drift = drift
        return observed, drift

    def swap(self) -> SwapOutcome:
        """Install the other variant over the target.

        Drift seen before a failure stays available as ``last_drift``.

        Raises:
            ConfigIncompleteError: a FILES entry is empty
            FileReadError: the target could not be hashed
            UnknownVariantError: the target matches neither hash
            FileMissingError: the target disappeared since startup
            CopyFailedError: the install failed, target untouched
        """
        self.last_drift = None
        self.config.require_complete()
        observed, drift = self.check_drift()

        if observed is VariantState.UNKNOWN:
            raise UnknownVariantError(self.target_path, self.last_digest)
        if observed is VariantState.MISSING:
            raise FileMissingError(self.target_path)

        new_state = observed.other
        self._install(new_state, operation="swap", drift=drift)
        logger.info(f"Swapped {observed.label} -> {new_state.label}")
        return SwapOutcome(previous=observed, state=new_state, drift=drift)

    def request_swap(self) -> SwapResult:
        """Swap variants, reporting errors and drift instead of raising."""
        try:
            outcome = self.swap()
        except SwapperError as e:
            logger.error(f"Swap failed: {e}")
            return SwapResult(state=self._state, warning=self.last_drift, error=e)

        return SwapResult(state=outcome.state, warning=outcome.drift)

    def _install(
        self,
        variant: VariantState,
        operation: str,
        drift: Optional[DriftDetected] = None,
    ) -> None:
        source = self.storage_path(variant)
        target = self.target_path
        from_state = self._state

        try:
            with timed_section(operation, target=str(target), to=variant.value):
                install_file(source, target)
        except OSError as e:
            error = CopyFailedError(source, target, e.strerror or str(e))
            log_swap(
                operation, target, source, from_state.value, variant.value,
                success=False, drift_detected=drift is not None, error=str(error),
            )
            raise error from e

        self._state = variant
        log_swap(
            operation, target, source, from_state.value, variant.value,
            success=True, drift_detected=drift is not None,
        )
