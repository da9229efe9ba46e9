"""
Unit tests for Localizator.

Tests cover:
- Text lookup per entity (USER, COMMON)
- Language switching (VI/EN) and the config.LANGUAGE default
- VND currency formatting
- Key parity between l10n files
"""

import json

import pytest
from unittest.mock import patch

from enums.text_entity import TextEntity
from utils.localizator import L10N_DIR, Localizator


class TestGetText:

    def test_explicit_language(self):
        assert Localizator.get_text(TextEntity.USER, "error_empty_cart", lang="vi") == "Danh sách sản phẩm là bắt buộc"
        assert Localizator.get_text(TextEntity.USER, "error_empty_cart", lang="en") == "A list of products is required"

    @patch('config.LANGUAGE', 'en')
    def test_default_language_from_config(self):
        assert Localizator.get_text(TextEntity.COMMON, "error_unexpected") == "Server error while calculating prices"

    @patch('config.LANGUAGE', 'vi')
    def test_default_language_vi(self):
        assert Localizator.get_text(TextEntity.COMMON, "error_unexpected") == "Lỗi server khi tính toán giá"

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            Localizator.get_text(TextEntity.USER, "no_such_key", lang="vi")


class TestFormatCurrency:

    @pytest.mark.parametrize("amount,lang,expected", [
        (60000, "vi", "60.000 ₫"),
        (1250000, "vi", "1.250.000 ₫"),
        (1250000, "en", "1,250,000 ₫"),
        (500, "vi", "500 ₫"),
        (0, "en", "0 ₫"),
    ])
    def test_format(self, amount, lang, expected):
        assert Localizator.format_currency(amount, lang=lang) == expected

    def test_currency_symbol(self):
        assert Localizator.get_currency_symbol("vi") == "₫"


class TestL10nFiles:

    def test_languages_have_same_keys(self):
        with open(L10N_DIR / "vi.json", encoding="UTF-8") as f:
            vi = json.load(f)
        with open(L10N_DIR / "en.json", encoding="UTF-8") as f:
            en = json.load(f)

        assert vi.keys() == en.keys()
        for entity in vi:
            assert vi[entity].keys() == en[entity].keys(), f"Key mismatch in '{entity}'"

    def test_every_entity_present(self):
        for entity in TextEntity:
            assert Localizator._load("vi")[entity.value]
