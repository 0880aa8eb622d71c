"""Tests for app settings persistence."""
import json

import pytest

from kindling.core.exceptions import ValidationError
from kindling.core.settings import AppSettings


class TestAppSettings:
    """Tests for AppSettings load/save."""

    def test_missing_file_returns_defaults(self, tmp_dir):
        """Loading a non-existent file yields empty settings."""
        settings = AppSettings.load(tmp_dir / "settings.json")
        assert settings == AppSettings()
        assert settings.author_name is None

    def test_save_and_load(self, tmp_dir):
        """Saved settings load back unchanged."""
        path = tmp_dir / "nested" / "settings.json"
        original = AppSettings(
            author_name="Jane Q. Doe",
            contact_address_line1="1 Main Street",
            contact_email="jane@example.com",
        )
        original.save(path)

        assert path.exists()
        assert AppSettings.load(path) == original

    def test_save_writes_pretty_json(self, tmp_dir):
        """The file is indented JSON with every field."""
        path = tmp_dir / "settings.json"
        AppSettings(author_name="Ann").save(path)

        text = path.read_text(encoding="utf-8")
        assert '\n  "author_name": "Ann"' in text
        assert set(json.loads(text)) == set(AppSettings.field_names())

    def test_unknown_keys_ignored(self, tmp_dir):
        """Keys from newer versions do not break loading."""
        path = tmp_dir / "settings.json"
        path.write_text(json.dumps({"author_name": "Ann", "theme": "dark"}), encoding="utf-8")

        assert AppSettings.load(path).author_name == "Ann"

    def test_blank_values_become_none(self):
        """Whitespace-only strings are treated as unset."""
        settings = AppSettings.from_dict({"author_name": "  ", "contact_phone": 5551234})
        assert settings.author_name is None
        assert settings.contact_phone == "5551234"

    def test_malformed_json_raises(self, tmp_dir):
        """Invalid JSON raises ValidationError."""
        path = tmp_dir / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValidationError):
            AppSettings.load(path)

    def test_non_object_raises(self, tmp_dir):
        """A JSON list is rejected."""
        path = tmp_dir / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ValidationError, match="not a JSON object"):
            AppSettings.load(path)
