"""Reply and notification texts, kept in `langs/en.json`."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)

TEXTS_FILE = Path(__file__).parent / "langs" / "en.json"


class TextManager:
    """
    Formats texts by key.

    Unknown keys render as `[key]` so a missing entry shows up in the chat
    instead of failing the handler.
    """

    def __init__(self, texts: Dict[str, str]):
        self._texts = texts

    def get(self, key: str, **kwargs) -> str:
        text = self._texts.get(key)
        if text is None:
            logger.warning(f"Missing text: {key}")
            return f"[{key}]"
        if not kwargs:
            return text
        try:
            return text.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Text {key} needs placeholder {e}")
            return text


@lru_cache(maxsize=None)
def get_texts() -> TextManager:
    """Shared TextManager, loaded from disk once."""
    with open(TEXTS_FILE, "r", encoding="utf-8") as f:
        return TextManager(json.load(f))
