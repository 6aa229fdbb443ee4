"""Application settings and logging setup."""

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

APP_NAME = "PageBuilder"

DEFAULTS: Dict[str, object] = {
    "openai_model": "gpt-4o-mini",
    "request_timeout": 60,
    "preview_debounce_ms": 400,
    "default_zoom": 50,
    "log_level": "INFO",
}


def app_data_dir() -> Path:
    """Return the platform-specific application data directory."""
    if os.name == "nt":
        base = Path(os.getenv("LOCALAPPDATA", Path.home()))
    else:
        base = Path.home() / ".local" / "share"
    target = base / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


class SettingsManager:
    """Small settings helper storing JSON data.

    Missing keys are filled from :data:`DEFAULTS` and written back. The OpenAI
    key is only ever read from the environment.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory is not None else app_data_dir()
        self.path = self.directory / "settings.json"
        self._settings: Dict[str, object] = {}
        self.load()

    def load(self) -> None:
        changed = False
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                data = {}
            self._settings = data if isinstance(data, dict) else {}
        else:
            self._settings = {}

        for key, value in DEFAULTS.items():
            if self._settings.get(key, "") == "":
                self._settings[key] = value
                changed = True

        if changed:
            try:
                self.save()
            except OSError:
                logging.getLogger(__name__).warning("Could not write settings to %s", self.path)

    def save(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")

    def get(self, key: str, default: object = "") -> object:
        return self._settings.get(key, default)

    def set(self, key: str, value: object) -> None:
        self._settings[key] = value
        self.save()

    def get_int(self, key: str) -> int:
        try:
            return int(self._settings.get(key, DEFAULTS.get(key, 0)))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return int(DEFAULTS.get(key, 0))  # type: ignore[arg-type]

    @property
    def openai_model(self) -> str:
        return str(self.get("openai_model", DEFAULTS["openai_model"]))

    @property
    def request_timeout(self) -> int:
        return self.get_int("request_timeout")

    @property
    def preview_debounce_ms(self) -> int:
        return self.get_int("preview_debounce_ms")

    @property
    def default_zoom(self) -> int:
        return self.get_int("default_zoom")

    @property
    def log_level(self) -> str:
        level = str(self.get("log_level", "INFO")).upper()
        return level if level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL") else "INFO"

    @property
    def log_path(self) -> Path:
        return self.directory / "logs" / "pagebuilder.log"

    @property
    def drafts_dir(self) -> Path:
        return self.directory / "drafts"

    @staticmethod
    def openai_api_key() -> str:
        return os.environ.get("OPENAI_API_KEY", "")


def configure_logging(settings: SettingsManager) -> None:
    """Set up the root logger with stderr and rotating file handlers.

    Does nothing when the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    settings.log_path.parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, settings.log_level)
    root.setLevel(level)

    fmt = logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(fmt)
    root.addHandler(stderr_handler)

    file_handler = RotatingFileHandler(settings.log_path, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)
