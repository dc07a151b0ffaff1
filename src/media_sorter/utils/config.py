"""Configuration management for media-sorter."""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from media_sorter.core.models import ShortcutConfig
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)


class Config:
    """Manages user configuration and settings."""

    DEFAULT_CONFIG_DIR = Path.home() / ".media-sorter"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

    DEFAULT_SHORTCUTS = [
        {"key": "1", "targetDir": "", "label": "Category 1"},
        {"key": "2", "targetDir": "", "label": "Category 2"},
        {"key": "3", "targetDir": "", "label": "Category 3"},
        {"key": "d", "targetDir": ".delete", "label": "To delete"},
        {"key": "s", "targetDir": ".star", "label": "Favourites"},
    ]

    DEFAULT_SETTINGS = {
        "hashing": {
            "chunk_size": 200,  # files per hashing task
            "max_workers": 8,
        },
        "reorder": {
            "digit_width": 5,
            "max_jobs": 5,  # concurrent subdirectories in batch mode
        },
        "moves": {
            "max_conflict_attempts": 1000,
            "max_rename_tries": 100,
        },
        "undo": {"max_size": 50},
        "shortcuts": DEFAULT_SHORTCUTS,
    }

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config file (default: ~/.media-sorter/config.json)
        """
        self.config_file = config_file or self.DEFAULT_CONFIG_FILE
        self.settings: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file or create with defaults."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if not isinstance(loaded, dict):
                    raise ValueError("top-level value must be an object")
                self.settings = _merge_defaults(loaded, self.DEFAULT_SETTINGS)
                logger.debug(f"Loaded configuration from {self.config_file}")
            except (json.JSONDecodeError, ValueError) as e:
                logger.warning(f"Invalid config file: {e}. Using defaults.")
                self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        else:
            logger.info("No config file found. Creating with defaults.")
            self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
            self.save()

    def save(self) -> None:
        """Save configuration to file."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=2)
        logger.debug(f"Saved configuration to {self.config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., 'undo.max_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.settings
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value
        self.save()

    def get_shortcuts(self) -> List[ShortcutConfig]:
        """
        Get the configured shortcuts.

        Falls back to the default shortcuts when the stored list is missing
        or cannot be parsed.
        """
        raw = self.get("shortcuts")
        if not isinstance(raw, list):
            return _parse_shortcuts(self.DEFAULT_SHORTCUTS)
        try:
            return _parse_shortcuts(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid shortcut configuration: {e}. Using defaults.")
            return _parse_shortcuts(self.DEFAULT_SHORTCUTS)

    def save_shortcuts(self, shortcuts: List[ShortcutConfig]) -> None:
        """Persist the shortcut list."""
        self.set("shortcuts", [shortcut.to_dict() for shortcut in shortcuts])
        logger.info(f"Saved {len(shortcuts)} shortcuts")

    def set_shortcut(self, shortcut: ShortcutConfig) -> None:
        """Add a shortcut or replace the one bound to the same key."""
        shortcuts = [s for s in self.get_shortcuts() if not s.matches(shortcut.key)]
        shortcuts.append(shortcut)
        self.save_shortcuts(shortcuts)


def _parse_shortcuts(raw: List[Dict[str, Any]]) -> List[ShortcutConfig]:
    return [ShortcutConfig.from_dict(item) for item in raw]


def _merge_defaults(settings: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from ``settings`` with values from ``defaults``."""
    merged = copy.deepcopy(settings)
    for key, default in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(default)
        elif isinstance(default, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], default)
    return merged
