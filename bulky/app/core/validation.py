"""Input validation utilities shared by request schemas and services."""
import re
from typing import List


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """
    Validate password strength.

    Returns:
        (is_valid, list_of_errors)
    """
    errors = []

    if len(password) < 8:
        errors.append("password minimal 8 karakter")

    if len(password) > 128:
        errors.append("password maksimal 128 karakter")

    if not re.search(r'[a-z]', password):
        errors.append("password harus mengandung huruf kecil")

    if not re.search(r'[A-Z]', password):
        errors.append("password harus mengandung huruf besar")

    if not re.search(r'\d', password):
        errors.append("password harus mengandung angka")

    return (len(errors) == 0, errors)


def sanitize_user_input(text: str, max_length: int = 10000) -> str:
    """
    Strip null bytes and control characters from free text and cap its length.
    Newlines and tabs are kept.
    """
    if not text:
        return ""

    if len(text) > max_length:
        text = text[:max_length]

    text = text.replace('\x00', '')
    text = ''.join(char for char in text if ord(char) >= 32 or char in '\n\r\t')

    return text.strip()
