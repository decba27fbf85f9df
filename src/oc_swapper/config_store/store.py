"""Configuration Store for the swapper's config.ini.

Handles:
- Reading the INI file into an immutable Configuration
- First-run bootstrap of a default config file
- Atomic saves
- Resolving the target and storage paths from their folders
"""
import configparser
import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..errors import ConfigIncompleteError, ConfigParseError, ConfigWriteError
from ..utils.atomic_write import atomic_write_text

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OC_SWAPPER_CONFIG"
DEFAULT_CONFIG_FILE = "config.ini"

# File name appended to every configured folder
DLL_NAME = "openvr_api.dll"

FILES_SECTION = "FILES"
RUNTIME_SECTION = "RUNTIME"

DEFAULT_STEAMVR_STORAGE_DIR = "SteamVR Files"
DEFAULT_OPENCOMPOSITE_STORAGE_DIR = "OpenComposite Files"

# attribute name -> INI key, in file order
FILES_KEYS = {
    "steamvr_hash": "SteamFile",
    "opencomposite_hash": "OpenCompositeFile",
    "openvr_dll_dir": "OpenVRDLLFilePath",
    "steamvr_storage_dir": "SteamVRStorageFolder",
    "opencomposite_storage_dir": "OpenCompositeStorageFolder",
}
LAST_USED_KEY = "LastUsed"


def _new_parser() -> configparser.ConfigParser:
    # Keys keep their case; Windows paths may contain '%'
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    return parser


@dataclass(frozen=True)
class Configuration:
    """The two variants and where they live.

    Folder fields hold the raw values from the file. The ``*_path``
    properties join them with ``base_dir`` and the DLL name; absolute
    folders win over ``base_dir`` by the normal path-join rule.
    """
    steamvr_hash: str = ""
    opencomposite_hash: str = ""
    openvr_dll_dir: str = ""
    steamvr_storage_dir: str = DEFAULT_STEAMVR_STORAGE_DIR
    opencomposite_storage_dir: str = DEFAULT_OPENCOMPOSITE_STORAGE_DIR
    # Written back untouched, never used to decide anything
    last_used: str = "0"
    base_dir: Path = field(default_factory=Path)

    @property
    def target_path(self) -> Path:
        return self.base_dir / self.openvr_dll_dir / DLL_NAME

    @property
    def steamvr_storage_path(self) -> Path:
        return self.base_dir / self.steamvr_storage_dir / DLL_NAME

    @property
    def opencomposite_storage_path(self) -> Path:
        return self.base_dir / self.opencomposite_storage_dir / DLL_NAME

    def missing_keys(self) -> list[str]:
        """INI keys under [FILES] that are still empty."""
        return [
            key for attr, key in FILES_KEYS.items()
            if not getattr(self, attr).strip()
        ]

    def is_complete(self) -> bool:
        return not self.missing_keys()

    def require_complete(self) -> None:
        """Raise ConfigIncompleteError unless every FILES entry is set."""
        missing = self.missing_keys()
        if missing:
            raise ConfigIncompleteError(missing)

    def to_ini(self) -> str:
        """Serialize to the config.ini text format."""
        parser = _new_parser()
        parser[FILES_SECTION] = {key: getattr(self, attr) for attr, key in FILES_KEYS.items()}
        parser[RUNTIME_SECTION] = {LAST_USED_KEY: self.last_used}

        buffer = io.StringIO()
        parser.write(buffer, space_around_delimiters=False)
        return buffer.getvalue()

    @classmethod
    def from_ini(cls, text: str, base_dir: Path, source: str = "<string>") -> "Configuration":
        """Parse config.ini text.

        Raises:
            configparser.Error: on malformed syntax
            KeyError: when the [FILES] section is absent
        """
        parser = _new_parser()
        parser.read_string(text, source=source)

        if not parser.has_section(FILES_SECTION):
            raise KeyError(FILES_SECTION)
        files = parser[FILES_SECTION]

        values = {attr: files.get(key, "") for attr, key in FILES_KEYS.items()}
        last_used = parser.get(RUNTIME_SECTION, LAST_USED_KEY, fallback="0")

        return cls(**values, last_used=last_used, base_dir=Path(base_dir))


class ConfigStore:
    """
    Loads, creates and saves the swapper configuration.

    File layout:
        [FILES]
        SteamFile=<hex hash>
        OpenCompositeFile=<hex hash>
        OpenVRDLLFilePath=<dir>
        SteamVRStorageFolder=<dir>
        OpenCompositeStorageFolder=<dir>

        [RUNTIME]
        LastUsed=<0 or 1>
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize the config store.

        Args:
            config_path: Config file (default: $OC_SWAPPER_CONFIG, else ./config.ini)
        """
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
        self.config_path = Path(config_path).expanduser().absolute()

    @property
    def base_dir(self) -> Path:
        """Directory relative folders in the config resolve against."""
        return self.config_path.parent

    @property
    def exists(self) -> bool:
        return self.config_path.exists()

    def default_config(self) -> Configuration:
        return Configuration(base_dir=self.base_dir)

    def load(self) -> Configuration:
        """
        Load the configuration, creating a default file on first run.

        Raises:
            ConfigParseError: file exists but is unreadable or malformed
            ConfigWriteError: first-run defaults could not be persisted
                (the defaults are available as ``error.config``)
        """
        if not self.exists:
            config = self.default_config()
            logger.info(f"No config at {self.config_path}, creating defaults")
            try:
                self.save(config)
            except ConfigWriteError as e:
                e.config = config
                raise
            return config

        try:
            text = self.config_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(self.config_path, str(e)) from e

        try:
            config = Configuration.from_ini(text, self.base_dir, source=str(self.config_path))
        except configparser.Error as e:
            raise ConfigParseError(self.config_path, str(e)) from e
        except KeyError as e:
            raise ConfigParseError(
                self.config_path, f"missing [{FILES_SECTION}] section"
            ) from e

        logger.debug(f"Loaded config from {self.config_path}")
        missing = config.missing_keys()
        if missing:
            logger.warning(f"Config {self.config_path} has empty entries: {', '.join(missing)}")
        return config

    def save(self, config: Configuration) -> None:
        """
        Write the configuration atomically.

        Raises:
            ConfigWriteError: on any filesystem failure
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self.config_path, config.to_ini())
        except OSError as e:
            raise ConfigWriteError(self.config_path, str(e)) from e

        logger.info(f"Saved config to {self.config_path}")
