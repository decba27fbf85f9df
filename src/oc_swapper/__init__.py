"""OC Swapper - swap openvr_api.dll between the SteamVR and OpenComposite builds."""
from .config_store import ConfigStore, Configuration
from .errors import (
    SwapperError,
    ConfigParseError,
    ConfigWriteError,
    ConfigIncompleteError,
    FileReadError,
    FileMissingError,
    CopyFailedError,
    UnknownVariantError,
)
from .variants import VariantManager, VariantState, DriftDetected, SwapResult

__version__ = "1.0.0"

ABOUT_TEXT = (
    "OC Swapper - a tool by iAmMe\n\n"
    "OC Swapper offers a single click solution for swapping between SteamVR DLL binary "
    "and OpenComposite DLL binary for Skyrim VR setups"
)


def get_about_text() -> str:
    return ABOUT_TEXT


__all__ = [
    "ConfigStore",
    "Configuration",
    "SwapperError",
    "ConfigParseError",
    "ConfigWriteError",
    "ConfigIncompleteError",
    "FileReadError",
    "FileMissingError",
    "CopyFailedError",
    "UnknownVariantError",
    "VariantManager",
    "VariantState",
    "DriftDetected",
    "SwapResult",
    "get_about_text",
    "ABOUT_TEXT",
    "__version__",
]
