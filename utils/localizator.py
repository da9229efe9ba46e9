import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import config
from enums.text_entity import TextEntity

L10N_DIR = Path(__file__).resolve().parent.parent / "l10n"


class Localizator:

    @staticmethod
    @lru_cache(maxsize=None)
    def _load(language: str) -> dict:
        with open(L10N_DIR / f"{language}.json", "r", encoding="UTF-8") as f:
            return json.loads(f.read())

    @staticmethod
    def get_text(entity: TextEntity, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given entity and key.

        Args:
            entity: Entity type (USER, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "vi", "en").
                  If None, uses config.LANGUAGE (default).
                  Pass it explicitly in request handlers to avoid relying on
                  global state.

        Returns:
            Localized text string

        Example:
            text = Localizator.get_text(TextEntity.USER, "error_empty_cart", lang="en")
        """
        language = lang if lang is not None else config.LANGUAGE
        data = Localizator._load(language)
        return data[entity.value][key]

    @staticmethod
    def get_currency_symbol(lang: Optional[str] = None) -> str:
        return Localizator.get_text(TextEntity.COMMON, "currency_symbol", lang=lang)

    @staticmethod
    def format_currency(amount: int, lang: Optional[str] = None) -> str:
        """
        Format a VND amount for display.

        Examples:
            >>> Localizator.format_currency(60000, lang="vi")
            '60.000 ₫'
            >>> Localizator.format_currency(1250000, lang="en")
            '1,250,000 ₫'
        """
        separator = Localizator.get_text(TextEntity.COMMON, "thousands_separator", lang=lang)
        return f"{amount:,}".replace(",", separator) + f" {Localizator.get_currency_symbol(lang)}"
