"""
utils/validation_utils.py

Purpose: Input validation

- Email syntax validation
- CPF and CNPJ checksum validation
- Verification code parsing
- Input sanitization

All functions are pure: no I/O, no state.
"""

import re
from typing import Optional, Sequence

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

CPF_LENGTH = 11
CNPJ_LENGTH = 14

CPF_FIRST_WEIGHTS = tuple(range(10, 1, -1))   # 10..2
CPF_SECOND_WEIGHTS = tuple(range(11, 1, -1))  # 11..2
CNPJ_FIRST_WEIGHTS = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
CNPJ_SECOND_WEIGHTS = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def validate_email(email: str) -> bool:
    """
    Validates email shape: local@domain.tld

    Exactly one "@", at least one "." after it, no whitespace anywhere.

    Args:
        email: Address typed by the user

    Returns:
        True if valid, False otherwise
    """
    if not email:
        return False
    return bool(EMAIL_PATTERN.fullmatch(email))


def only_digits(value: str) -> str:
    """Strips everything except 0-9 (dots, dashes and slashes of formatted ids)."""
    if not value:
        return ""
    return re.sub(r"[^0-9]", "", value)


def _check_digit(digits: str, weights: Sequence[int]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(cpf: str) -> bool:
    """
    Validates a CPF (individual taxpayer id).

    Formatting characters are ignored, so "529.982.247-25" and
    "52998224725" are equivalent.

    Args:
        cpf: CPF string

    Returns:
        True if both check digits match
    """
    digits = only_digits(cpf)

    if len(digits) != CPF_LENGTH:
        return False

    # 000.000.000-00, 111.111.111-11, ... pass the checksum but are not issued
    if len(set(digits)) == 1:
        return False

    first = _check_digit(digits[:9], CPF_FIRST_WEIGHTS)
    second = _check_digit(digits[:10], CPF_SECOND_WEIGHTS)

    return first == int(digits[9]) and second == int(digits[10])


def validate_cnpj(cnpj: str) -> bool:
    """
    Validates a CNPJ (business taxpayer id).

    Weights cycle 5..2 then 9..2 for the first check digit and
    6..2 then 9..2 for the second.

    Args:
        cnpj: CNPJ string

    Returns:
        True if both check digits match
    """
    digits = only_digits(cnpj)

    if len(digits) != CNPJ_LENGTH:
        return False

    first = _check_digit(digits[:12], CNPJ_FIRST_WEIGHTS)
    second = _check_digit(digits[:13], CNPJ_SECOND_WEIGHTS)

    return first == int(digits[12]) and second == int(digits[13])


def parse_verification_code(text: str) -> Optional[int]:
    """
    Parses the code typed by the user.

    Args:
        text: Message text

    Returns:
        The integer value, or None if the text is not a number
    """
    if not text:
        return None

    text = text.strip()
    # isdigit() also accepts superscripts and circled digits that int() rejects
    if not text.isdecimal():
        return None

    return int(text)


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitizes free-text user input.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Remove potentially dangerous characters
    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip()
