"""Filename parsing helpers for series and episode detection."""

import re

# Characters that separate tokens inside a media filename
SEPARATORS = " \t._-[]()"

_DIGIT_RUN = re.compile(r"\d+")
_NATURAL_SPLIT = re.compile(r"(\d+)")

# Numerals that behave like digits when they distinguish episodes
CJK_NUMERALS = frozenset("零〇一二三四五六七八九十百千")


def natural_sort_key(name: str) -> tuple:
    """
    Build a case-insensitive sort key that compares digit runs numerically.

    Example:
        >>> sorted(["file10", "File2", "file1"], key=natural_sort_key)
        ['file1', 'File2', 'file10']
    """
    parts: list[object] = []
    for part in _NATURAL_SPLIT.split(name.casefold()):
        parts.append(int(part) if part.isdecimal() else part)
    # raw name keeps ordering stable for names differing only in case
    return (tuple(parts), name)


def is_hidden(name: str) -> bool:
    """Check if a directory entry is hidden."""
    return name.startswith(".")


def extract_episode_token(suffix: str) -> str | None:
    """
    Extract the token identifying an episode from the part of a filename
    that follows its series prefix.

    Args:
        suffix: Filename remainder after the series prefix

    Returns:
        The first digit run of the leading token, the leading token itself
        when it has no digits, or None if there is nothing to extract

    Example:
        >>> extract_episode_token("02.en")
        '02'
        >>> extract_episode_token("_ch13_final")
        '13'
        >>> extract_episode_token("Extras")
        'Extras'
    """
    remainder = suffix.lstrip(SEPARATORS)
    if not remainder:
        return None

    end = len(remainder)
    for i, char in enumerate(remainder):
        if char in SEPARATORS:
            end = i
            break
    token = remainder[:end]

    digits = _DIGIT_RUN.search(token)
    if digits:
        return digits.group(0)
    return token


def episode_tokens_equal(left: str | None, right: str | None) -> bool:
    """
    Compare two episode tokens, numerically when both are decimal.

    Example:
        >>> episode_tokens_equal("02", "2")
        True
        >>> episode_tokens_equal("2", "20")
        False
    """
    if left is None or right is None:
        return False
    if left.isdecimal() and right.isdecimal():
        return int(left) == int(right)
    return left == right


def count_occurrences(text: str, needle: str) -> int:
    """Count non-overlapping, case-sensitive occurrences of needle in text."""
    if not needle:
        return 0
    return text.count(needle)
