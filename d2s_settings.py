from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent
SETTINGS_PATH = DATA_DIR / "settings.json"
DEFAULT_SETTINGS: Dict[str, object] = {
    "language": "en_us",
    "profile": "minimal",
    "make_backup": True,
    "pause_on_exit": True,
    "remember_path": False,
    "last_path": "",
}


def load_settings(path: Optional[Path] = None) -> Dict[str, object]:
    """Read ``settings.json`` over :data:`DEFAULT_SETTINGS`.

    Missing or malformed files give the defaults; keys with a value of the
    wrong type keep their default.
    """
    settings = DEFAULT_SETTINGS.copy()
    path = Path(path) if path is not None else SETTINGS_PATH
    try:
        with path.open(encoding="utf-8") as file:
            loaded = json.load(file)
    except (OSError, json.JSONDecodeError):
        return settings
    if not isinstance(loaded, dict):
        return settings
    for key, default in DEFAULT_SETTINGS.items():
        value = loaded.get(key)
        if isinstance(value, type(default)):
            settings[key] = value
    return settings


def save_settings(settings: Dict[str, object], path: Optional[Path] = None) -> bool:
    path = Path(path) if path is not None else SETTINGS_PATH
    settings_to_save = DEFAULT_SETTINGS.copy()
    for key, default in DEFAULT_SETTINGS.items():
        value = settings.get(key)
        if isinstance(value, type(default)):
            settings_to_save[key] = value
    try:
        with path.open("w", encoding="utf-8") as file:
            json.dump(settings_to_save, file, ensure_ascii=False, indent=2)
    except OSError as exc:
        logger.warning("could not write settings to %s: %s", path, exc)
        return False
    return True
