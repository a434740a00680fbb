"""Mobile number normalization and validation.

Accepts digits, spaces, hyphens, parentheses, and an optional leading +.
"""

import re


def normalize_mobile(number: str) -> str:
    return number.strip()


def is_valid_mobile(number: str) -> bool:
    # Must contain at least one digit
    if not re.search(r"\d", number):
        return False

    return bool(re.match(r"^\+?[\d\s\-()]+$", number))
