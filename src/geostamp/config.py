# src/geostamp/config.py
import json
import logging
from pathlib import Path
from typing import Dict, Any

from .constants import DEFAULT_FONT_PATH, DEFAULT_JPEG_QUALITY, DEFAULT_OCR_LANGUAGES

# Configure logger
logger = logging.getLogger(__name__)

# Config paths
CONFIG_DIR = Path.home() / ".geostamp"
CONFIG_FILE = CONFIG_DIR / "settings.json"

DEFAULT_CONFIG = {
    "input_dir": "",
    "output_dir": "",
    "jpeg_quality": DEFAULT_JPEG_QUALITY,
    "font_path": DEFAULT_FONT_PATH,
    "ocr_languages": list(DEFAULT_OCR_LANGUAGES),
}

SETTINGS_KEYS = ("jpeg_quality", "font_path", "ocr_languages")


def _default_config() -> Dict[str, Any]:
    config = DEFAULT_CONFIG.copy()
    config["ocr_languages"] = list(DEFAULT_CONFIG["ocr_languages"])
    return config


class ConfigManager:
    @staticmethod
    def load_config() -> Dict[str, Any]:
        """Carga la configuración desde el archivo JSON o devuelve los valores por defecto."""
        if not CONFIG_FILE.exists():
            return _default_config()

        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
                # Merge with defaults to handle new keys
                config = _default_config()
                config.update(data)
                return config
        except Exception as e:
            logger.warning(f"No se pudo cargar la configuración: {e}")
            return _default_config()

    @staticmethod
    def _write(config: Dict[str, Any]) -> None:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=4)

    @staticmethod
    def save_config(input_dir: str = "", output_dir: str = "", **kwargs) -> None:
        """Guarda la configuración completa en el archivo JSON."""
        current = ConfigManager.load_config()

        if input_dir:
            current["input_dir"] = str(input_dir)
        if output_dir:
            current["output_dir"] = str(output_dir)

        current.update(kwargs)

        try:
            ConfigManager._write(current)
        except Exception as e:
            logger.warning(f"Error guardando configuración: {e}")

    @staticmethod
    def update_settings(settings: Dict[str, Any]) -> None:
        """Update only processing settings (not paths)."""
        current = ConfigManager.load_config()
        for key in SETTINGS_KEYS:
            if key in settings:
                current[key] = settings[key]

        try:
            ConfigManager._write(current)
        except Exception as e:
            logger.warning(f"Error guardando ajustes: {e}")
