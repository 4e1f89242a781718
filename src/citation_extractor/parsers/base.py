"""Base class for citation classifiers and the variants they produce."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from ..models import CitationStyle, Identifiers

IDENTIFIER_CONFIDENCE = 0.9
FULL_CONFIDENCE = 0.7
INLINE_CONFIDENCE = 0.6
FALLBACK_CONFIDENCE = 0.3

YEAR_TOKEN = re.compile(r"\b(?:19|20)\d{2}\b")

_AUTHOR_SEPARATOR = re.compile(r"\s*(?:,|&|\band\b)\s*")
_KEY_SEPARATOR = re.compile(r"\s*(?:,|;|&|\band\b)\s*")
_ET_AL = re.compile(r"\s*\bet\s+al\b\.?", re.IGNORECASE)
_NON_NAME_CHARS = re.compile(r"[^\w\s'-]")


@dataclass
class Identified:
    """DOI / PubMed / arXiv hits found in a span, independent of its style."""

    identifiers: Identifiers

    confidence: ClassVar[float] = IDENTIFIER_CONFIDENCE


@dataclass
class Classification:
    """Fields recovered by a style classifier. Offsets are relative to the span."""

    raw_text: str
    start: int = 0
    style: CitationStyle = CitationStyle.UNKNOWN
    authors: list[str] = field(default_factory=list)
    year: Optional[int] = None
    has_et_al: bool = False
    title: Optional[str] = None
    journal: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None

    confidence: ClassVar[float] = 0.0


class FullBibliographic(Classification):
    confidence: ClassVar[float] = FULL_CONFIDENCE


class InlineParenthetical(Classification):
    confidence: ClassVar[float] = INLINE_CONFIDENCE


class Fallback(Classification):
    confidence: ClassVar[float] = FALLBACK_CONFIDENCE


class BaseClassifier(ABC):
    """Base class for rule-based citation classifiers."""

    name: str = "unknown"

    @abstractmethod
    def classify(self, span: str) -> Classification | None:
        """Classify a candidate span.

        Returns None if the span doesn't match this classifier's pattern.
        """
        ...


def parse_authors(author_str: str) -> list[str]:
    """Split an author string on commas, 'and' or '&'.

    Each part is trimmed of surrounding punctuation and whitespace; empty
    parts are dropped.
    """
    parts = _AUTHOR_SEPARATOR.split(author_str)
    authors = []
    for part in parts:
        part = part.strip(" .,")
        if part:
            authors.append(part)
    return authors


def split_et_al(author_str: str) -> tuple[list[str], bool]:
    """Parse an inline author segment, collapsing 'et al.' to one author.

    Returns (authors, has_et_al). When the token is present the remaining
    text is kept as a single author string with the token removed.
    """
    if _ET_AL.search(author_str):
        main = _ET_AL.sub("", author_str).strip(" ,")
        return ([main] if main else []), True
    return parse_authors(author_str), False


def canonical_author_key(authors: list[str], has_et_al: bool = False) -> str:
    """Normalize an author list for duplicate detection.

    Separators, initials, punctuation and case are discarded so that
    "Smith", "Smith, J." and "Smith J." produce the same key, while
    "Smith & Jones" and "Smith et al." stay distinct from "Smith".
    """
    joined = _ET_AL.sub("", " & ".join(authors).lower())
    surnames = []
    for part in _KEY_SEPARATOR.split(joined):
        part = _NON_NAME_CHARS.sub(" ", part)
        tokens = [t for t in part.split() if len(t) > 1]
        if tokens:
            surnames.append(" ".join(tokens))
    key = "|".join(surnames)
    if has_et_al:
        key += "+et-al"
    return key
