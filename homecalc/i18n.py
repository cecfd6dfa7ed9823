"""Minimal internationalization helpers."""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

TRANSLATIONS_DIR = Path(__file__).resolve().parent / "translations"
DEFAULT_LANG = "en"


@lru_cache()
def load_translations(lang: str) -> Dict[str, str]:
    """Load translation mappings for the given language."""
    path = TRANSLATIONS_DIR / f"{lang}.json"
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return {}


def t(key: str, lang: str = DEFAULT_LANG, **kwargs) -> str:
    """Translate ``key`` and fill any ``str.format`` placeholders.

    Missing keys fall back to English, then to the key itself.
    """
    text = load_translations(lang).get(key) or load_translations(DEFAULT_LANG).get(key, key)
    return text.format(**kwargs) if kwargs else text
