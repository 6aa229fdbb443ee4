from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.config import DEFAULTS, SettingsManager, configure_logging


def test_defaults_are_written(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path)
    saved = json.loads(settings.path.read_text(encoding="utf-8"))
    assert saved == DEFAULTS
    assert settings.default_zoom == 50
    assert settings.preview_debounce_ms == 400
    assert settings.drafts_dir == tmp_path / "drafts"


def test_existing_values_are_kept(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(json.dumps({"openai_model": "gpt-4o", "default_zoom": "75"}), encoding="utf-8")
    settings = SettingsManager(tmp_path)
    assert settings.openai_model == "gpt-4o"
    assert settings.default_zoom == 75
    assert settings.request_timeout == 60


def test_bad_values_fall_back(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(json.dumps({"request_timeout": "soon", "log_level": "chatty"}), encoding="utf-8")
    settings = SettingsManager(tmp_path)
    assert settings.request_timeout == 60
    assert settings.log_level == "INFO"


def test_corrupt_settings_file_is_replaced(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("{", encoding="utf-8")
    settings = SettingsManager(tmp_path)
    assert settings.get("openai_model") == DEFAULTS["openai_model"]


def test_api_key_comes_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert SettingsManager.openai_api_key() == "sk-env"


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    for handler in saved_handlers:
        root.removeHandler(handler)
    settings = SettingsManager(tmp_path)
    try:
        configure_logging(settings)
        configure_logging(settings)
        assert len(root.handlers) == 2
        logging.getLogger("pagebuilder.test").info("hello log")
        for handler in root.handlers:
            handler.flush()
        assert "hello log" in settings.log_path.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
