"""
Tests for text helpers (core.text) and input validation (core.validation).
"""
import pytest

from bulky.app.core.text import generate_slug, mask_name
from bulky.app.core.validation import sanitize_user_input, validate_password_strength


# --- generate_slug ---


@pytest.mark.parametrize("text,expected", [
    ("Kaos Polos", "kaos-polos"),
    ("Elektronik & Gadget!", "elektronik-gadget"),
    ("  Sepatu   Lari  ", "sepatu-lari"),
    ("--Promo--Akhir--Tahun--", "promo-akhir-tahun"),
    ("Ukuran 42", "ukuran-42"),
])
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


def test_generate_slug_empty():
    assert generate_slug("") == ""
    assert generate_slug("!!!") == ""


# --- mask_name ---


def test_mask_name_each_word():
    assert mask_name("Budi Santoso") == "B**i S*****o"


def test_mask_name_short_words_kept():
    assert mask_name("Li Ab") == "Li Ab"
    assert mask_name("Ani") == "A*i"


def test_mask_name_empty():
    assert mask_name("") == ""


# --- validate_password_strength ---


def test_strong_password():
    ok, errors = validate_password_strength("Rahasia123")
    assert ok is True
    assert errors == []


def test_weak_password_lists_every_problem():
    ok, errors = validate_password_strength("abc")
    assert ok is False
    assert "password minimal 8 karakter" in errors
    assert "password harus mengandung huruf besar" in errors
    assert "password harus mengandung angka" in errors


def test_password_too_long():
    ok, errors = validate_password_strength("Aa1" + "x" * 130)
    assert ok is False
    assert errors == ["password maksimal 128 karakter"]


# --- sanitize_user_input ---


def test_sanitize_strips_control_characters():
    assert sanitize_user_input("  halo\x00 dunia\x07 ") == "halo dunia"


def test_sanitize_keeps_newlines():
    assert sanitize_user_input("baris 1\nbaris 2") == "baris 1\nbaris 2"


def test_sanitize_caps_length():
    assert sanitize_user_input("a" * 50, max_length=10) == "a" * 10
