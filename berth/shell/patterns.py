"""Dangerous shell construct detection.

Pattern-based, not a shell grammar: every check is a regular expression run
over the raw string, so quoting does not hide a construct. Each pattern maps to
a category label that ends up in the user-facing error.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple
import re


class PatternCategory(str, Enum):
    """Labels of the dangerous-pattern catalog."""

    DANGEROUS_PATTERN = "dangerous pattern"
    PIPE = "pipe operator"
    REDIRECTION = "redirection"
    COMMAND_SUBSTITUTION = "command substitution"
    PATH_TRAVERSAL = "path traversal"
    NEWLINE_INJECTION = "newline injection"


@dataclass(frozen=True)
class PatternMatch:
    """A single dangerous construct found in a string."""

    category: PatternCategory
    fragment: str
    description: str
    position: int = 0


# Order is the reporting order: the first entry that matches names the error.
DANGEROUS_PATTERNS: List[Tuple[Pattern[str], PatternCategory, str]] = [
    (re.compile(r";"), PatternCategory.DANGEROUS_PATTERN, "command sequencing (semicolon)"),
    (re.compile(r"&&"), PatternCategory.DANGEROUS_PATTERN, "command chaining (AND)"),
    (re.compile(r"\|\|"), PatternCategory.DANGEROUS_PATTERN, "command chaining (OR)"),
    (re.compile(r"\$\("), PatternCategory.COMMAND_SUBSTITUTION, "command substitution $()"),
    (re.compile(r"`"), PatternCategory.COMMAND_SUBSTITUTION, "command substitution (backtick)"),
    (re.compile(r"\n"), PatternCategory.NEWLINE_INJECTION, "newline injection"),
    (re.compile(r"\r"), PatternCategory.NEWLINE_INJECTION, "carriage return injection"),
    (re.compile(r"(?<!\|)\|(?!\|)"), PatternCategory.PIPE, "pipe operator"),
    (re.compile(r">>"), PatternCategory.REDIRECTION, "output redirection (append)"),
    (re.compile(r"(?<!>)>(?!>)"), PatternCategory.REDIRECTION, "output redirection"),
    (re.compile(r"<"), PatternCategory.REDIRECTION, "input redirection"),
    (re.compile(r"\.\./"), PatternCategory.PATH_TRAVERSAL, "path traversal"),
]


def _enforced(category: PatternCategory, allow_pipes: bool, allow_redirects: bool) -> bool:
    if allow_pipes and category is PatternCategory.PIPE:
        return False
    if allow_redirects and category is PatternCategory.REDIRECTION:
        return False
    return True


def find_dangerous_patterns(
    text: str,
    allow_pipes: bool = False,
    allow_redirects: bool = False,
) -> List[PatternMatch]:
    """Find every cataloged dangerous construct in ``text``.

    Args:
        text: String to inspect
        allow_pipes: Skip the pipe operator category
        allow_redirects: Skip the redirection category

    Returns:
        Matches in catalog order, then by position
    """
    matches: List[PatternMatch] = []
    if not text:
        return matches

    for pattern, category, description in DANGEROUS_PATTERNS:
        if not _enforced(category, allow_pipes, allow_redirects):
            continue
        for found in pattern.finditer(text):
            matches.append(
                PatternMatch(
                    category=category,
                    fragment=found.group(0),
                    description=description,
                    position=found.start(),
                )
            )
    return matches


def first_dangerous_pattern(
    text: str,
    allow_pipes: bool = False,
    allow_redirects: bool = False,
) -> Optional[PatternMatch]:
    """Return the first dangerous construct in ``text``, or None."""
    if not text:
        return None

    for pattern, category, description in DANGEROUS_PATTERNS:
        if not _enforced(category, allow_pipes, allow_redirects):
            continue
        found = pattern.search(text)
        if found:
            return PatternMatch(
                category=category,
                fragment=found.group(0),
                description=description,
                position=found.start(),
            )
    return None


def count_patterns(
    text: str,
    allow_pipes: bool = False,
    allow_redirects: bool = False,
) -> Counter:
    """Count occurrences per ``(category, fragment)`` pair."""
    return Counter(
        (match.category, match.fragment)
        for match in find_dangerous_patterns(text, allow_pipes, allow_redirects)
    )


def is_safe(text: str, allow_pipes: bool = False, allow_redirects: bool = False) -> bool:
    """Check that ``text`` contains no cataloged construct."""
    return first_dangerous_pattern(text, allow_pipes, allow_redirects) is None
