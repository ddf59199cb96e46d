"""Tests for cover cache naming rules."""

import re

import pytest

from animelog.domain.value_objects import (
    DEFAULT_EXTENSION,
    cover_filename,
    infer_extension,
    make_cover_key,
)


class TestMakeCoverKey:
    """Test title -> key derivation."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Cowboy Bebop", "cowboy_bebop"),
            ("Re:Zero", "re_zero"),
            ("One-Piece", "one_piece"),
            ("A  B", "a__b"),
            ("Steins;Gate 0", "steins_gate_0"),
            ("K-ON!", "k_on_"),
        ],
    )
    def test_replaces_each_non_alnum_char(self, title: str, expected: str) -> None:
        assert make_cover_key(title) == expected

    def test_non_ascii_characters_become_underscores(self) -> None:
        """Each non-ASCII character is one replaced character."""
        assert make_cover_key("Shingeki no Kyojin: 進撃") == "shingeki_no_kyojin____"

    def test_unicode_case_folding_does_not_leak_into_key(self) -> None:
        """"İ" lowercases to "i" plus a combining dot, it must be replaced instead."""
        key = make_cover_key("İnuyasha")

        assert key == "_nuyasha"
        assert re.fullmatch(r"[a-z0-9_]+", key)
        assert make_cover_key("\u212aanon") == "_anon"

    def test_is_deterministic(self) -> None:
        assert make_cover_key("Naruto") == make_cover_key("Naruto")

    def test_same_key_for_spelling_variants(self) -> None:
        assert make_cover_key("One Piece") == make_cover_key("one-piece")


class TestInferExtension:
    """Test extension inference from image URLs."""

    def test_jpg(self) -> None:
        assert infer_extension("https://cdn.myanimelist.net/images/anime/4/19644.jpg") == ".jpg"

    def test_webp(self) -> None:
        assert infer_extension("https://cdn.myanimelist.net/images/anime/4/19644.webp") == ".webp"

    def test_query_string_is_ignored(self) -> None:
        assert infer_extension("https://cdn.example.com/a/b.png?s=123") == ".png"

    def test_uppercase_is_lowered(self) -> None:
        assert infer_extension("https://cdn.example.com/a/b.JPG") == ".jpg"

    def test_missing_extension_defaults_to_jpg(self) -> None:
        assert infer_extension("https://cdn.example.com/images/cover") == DEFAULT_EXTENSION


class TestCoverFilename:
    def test_format(self) -> None:
        assert cover_filename("cowboy_bebop", 1, ".jpg") == "cowboy_bebop-1.jpg"
