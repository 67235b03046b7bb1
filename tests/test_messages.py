"""Tests for localized message catalogs."""

from dataclasses import fields

import pytest


class TestCatalogs:
    """Test the English and Vietnamese catalogs."""

    def test_catalogs_define_every_message(self):
        """Every catalog field should be non-empty."""
        from genai_studio.messages import CATALOGS

        for catalog in CATALOGS.values():
            for f in fields(catalog):
                value = getattr(catalog, f.name)
                assert value, f"{catalog.locale}.{f.name} is empty"

    def test_unknown_locale_falls_back_to_english(self):
        """Unknown locales fall back to English."""
        from genai_studio.messages import ENGLISH, VIETNAMESE, get_catalog

        assert get_catalog("vi") is VIETNAMESE
        assert get_catalog("VI") is VIETNAMESE
        assert get_catalog("de") is ENGLISH

    @pytest.mark.parametrize("locale", ["en", "vi"])
    def test_exhaustion_message_names_pool_size(self, locale):
        """The exhaustion message includes the pool size."""
        from genai_studio.messages import get_catalog

        message = get_catalog(locale).exhausted(7)
        assert "7" in message
        assert "{count}" not in message

    def test_language_names(self):
        """Language codes map to display names, unknown ones pass through."""
        from genai_studio.messages import ENGLISH, VIETNAMESE

        assert ENGLISH.language_name("vi") == "Vietnamese"
        assert VIETNAMESE.language_name("en") == "tiếng Anh"
        assert ENGLISH.language_name("ja") == "ja"

    def test_passthrough_prefixes(self):
        """Catalog messages are recognized as user-facing."""
        from genai_studio.messages import ENGLISH, VIETNAMESE

        assert ENGLISH.is_user_facing(ENGLISH.auth)
        assert ENGLISH.is_user_facing(ENGLISH.quota)
        assert not ENGLISH.is_user_facing("Request contains an invalid argument.")
        assert VIETNAMESE.is_user_facing(VIETNAMESE.quota)
