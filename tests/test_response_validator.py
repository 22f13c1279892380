"""
Unit tests for ResponseValidator.

Tests cover:
1. Character array decoding + default substitution
2. Invalid responses (empty, non-JSON, non-array, empty array)
3. Media set decoding (URL / URL array / object array)
"""
import sys
import os
import json
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from agents.response_validator import ResponseValidator


class TestCharacterDecoding:

    def setup_method(self):
        self.validator = ResponseValidator()

    @pytest.mark.parametrize("raw", [None, "", "   ", "not json at all", '{"name": "Solo"}', "[]"])
    def test_invalid_responses(self, raw):
        result = self.validator.characters(raw, "scifi")
        assert not result.valid
        assert result.reason
        assert result.items == []

    def test_code_fenced_array(self):
        raw = '```json\n[{"name": "Mara", "description": "A pilot", "traits": ["Bold"], "role": "Protagonist"}]\n```'
        result = self.validator.characters(raw, "scifi")
        assert result.valid
        assert result.items[0].name == "Mara"
        assert result.items[0].role == "Protagonist"
        assert result.items[0].traits == ["Bold"]

    def test_missing_fields_get_defaults(self):
        result = self.validator.characters("[{}]", "western")
        character = result.items[0]
        assert character.name == "Unnamed Character"
        assert character.description == "A character suitable for a western theme video"
        assert character.traits == ["Adaptable", "Creative"]
        assert character.role == "Supporting Character"

    def test_non_object_entry_becomes_default_character(self):
        result = self.validator.characters('["just a string", {"name": "Ivy"}]', "x")
        assert [c.name for c in result.items] == ["Unnamed Character", "Ivy"]

    def test_traits_capped_at_five(self):
        raw = json.dumps([{"name": "T", "traits": ["a", "b", "c", "d", "e", "f", "g"]}])
        assert self.validator.characters(raw, "x").items[0].traits == ["a", "b", "c", "d", "e"]

    def test_fresh_ids(self):
        raw = json.dumps([{"name": "A", "id": "model-id"}, {"name": "B"}])
        items = self.validator.characters(raw, "x").items
        assert items[0].id != "model-id"
        assert items[0].id != items[1].id

    def test_deeply_nested_array(self):
        result = self.validator.characters("[" * 200000 + "]" * 200000, "scifi")
        assert not result.valid
        assert "RecursionError" in result.reason


class TestMediaSetDecoding:

    def setup_method(self):
        self.validator = ResponseValidator()

    def test_single_url(self):
        result = self.validator.media_set("https://img.example.com/a.png", limit=3)
        assert result.valid
        assert [i.url for i in result.items] == ["https://img.example.com/a.png"]

    def test_url_array_truncated(self):
        raw = json.dumps([f"https://img.example.com/{i}.png" for i in range(6)])
        result = self.validator.media_set(raw, limit=3)
        assert len(result.items) == 3

    def test_object_array_with_thumbnails(self):
        raw = json.dumps([
            {"url": "https://v.example.com/1.mp4", "thumbnailUrl": "https://v.example.com/1.jpg"},
            {"url": "https://v.example.com/2.mp4", "thumbnail_url": "https://v.example.com/2.jpg"},
            {"url": "https://v.example.com/3.mp4", "thumbnailUrl": "data:xyz"},
        ])
        items = self.validator.media_set(raw, limit=5).items
        assert [i.thumbnail_url for i in items] == [
            "https://v.example.com/1.jpg", "https://v.example.com/2.jpg", None,
        ]

    def test_non_http_entries_dropped(self):
        raw = json.dumps(["ftp://x/1.png", "https://ok/2.png", {"url": "file:///3.png"}, 42])
        items = self.validator.media_set(raw, limit=5).items
        assert [i.url for i in items] == ["https://ok/2.png"]

    def test_deeply_nested_array(self):
        assert not self.validator.media_set("[" * 200000 + "]" * 200000, limit=3).valid

    @pytest.mark.parametrize("raw", ["", "sorry, I can't do that", "{}", "[]", '["ftp://x"]'])
    def test_unusable(self, raw):
        assert not self.validator.media_set(raw, limit=3).valid
