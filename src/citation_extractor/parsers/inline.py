"""In-text (author-date) citation classifiers.

Two shapes are recognised inside a span:
  Narrative:  Smith and Jones (2020), Smith et al. (2020)
  Bracketed:  (Smith & Jones, 2020), (Smith et al., 2020, p. 4)

Every narrative citation of a span is reported, not only the first. The
bracketed family scan walks the whole text with five fixed patterns,
independent of the per-span cascade.
"""

import re
from typing import Callable, Iterator

from ..models import CitationStyle
from .base import (
    YEAR_TOKEN,
    BaseClassifier,
    InlineParenthetical,
    parse_authors,
    split_et_al,
)

# Sentence-initial words that would otherwise be read as a surname
_NOT_A_NAME = r"(?!(?:In|As|See|The|This|These|According|By|For|From|And|Also|While|Whereas)\b)"
_NAME = _NOT_A_NAME + r"[A-Z][\w'\-]+(?:,\s*(?:[A-Z]\.\s*)+)?"

_NARRATIVE_PATTERN = re.compile(
    r"(?P<authors>" + _NAME
    + r"(?:,?\s+(?:(?:and|&)\s+)?" + _NAME + r")*"
    + r"(?:\s+et\s+al\.?)?)"
    r"\s*\((?P<year>\d{4})[a-z]?\)"
)

_BRACKETED_PATTERN = re.compile(
    r"\((?P<inner>[^()]*?\b(?:19|20)\d{2}[a-z]?\b[^()]*)\)"
)

_YEAR_IN_SEGMENT = re.compile(r",?\s*\b(?:19|20)\d{2}[a-z]?\b")
_PAGE_SUFFIX = re.compile(r",?\s*pp?\.\s*(?P<pages>\d+(?:\s*[–—-]\s*\d+)?)")


def scan_narrative(span: str) -> Iterator[InlineParenthetical]:
    """Yield every narrative citation in a span, in text order."""
    for m in _NARRATIVE_PATTERN.finditer(span):
        authors, has_et_al = split_et_al(m.group("authors").strip())
        yield InlineParenthetical(
            raw_text=m.group(0),
            start=m.start(),
            style=CitationStyle.APA_INLINE,
            authors=authors,
            year=int(m.group("year")),
            has_et_al=has_et_al,
        )


class NarrativeClassifier(BaseClassifier):
    """Author(s) followed by a parenthesised year: Smith et al. (2020)."""

    name = "narrative"

    def classify(self, span: str) -> InlineParenthetical | None:
        return next(scan_narrative(span), None)


def parse_inline_content(inner: str) -> dict:
    """Parse the interior of a bracketed citation.

    Only the first ';'-separated citation is read; the rest are left to the
    bracketed family scan.
    """
    segment = inner.split(";")[0]
    fields: dict = {"authors": [], "year": None, "has_et_al": False, "pages": None}

    year = YEAR_TOKEN.search(segment)
    if year:
        fields["year"] = int(year.group(0))

    pages = _PAGE_SUFFIX.search(segment)
    if pages:
        fields["pages"] = pages.group("pages")
        segment = segment[: pages.start()] + segment[pages.end():]

    author_part = _YEAR_IN_SEGMENT.sub("", segment).strip(", ")
    if author_part:
        fields["authors"], fields["has_et_al"] = split_et_al(author_part)
    return fields


class BracketedClassifier(BaseClassifier):
    """Whole mention in brackets: (Smith & Jones, 2020)."""

    name = "bracketed"

    def classify(self, span: str) -> InlineParenthetical | None:
        m = _BRACKETED_PATTERN.search(span)
        if not m:
            return None
        fields = parse_inline_content(m.group("inner"))
        if fields["year"] is None:
            return None
        return InlineParenthetical(
            raw_text=m.group(0),
            start=m.start(),
            style=CitationStyle.APA_INLINE,
            **fields,
        )


# --- Bracketed family scan ---


def _single(author: str) -> tuple[list[str], bool]:
    return [author], False


def _organization(author: str) -> tuple[list[str], bool]:
    return [" ".join(author.split())], False


BRACKETED_FAMILY: list[tuple[str, re.Pattern, Callable[[str], tuple[list[str], bool]]]] = [
    # (Smith, 2023)
    ("single", re.compile(r"\((?P<author>[A-Z][a-z]+),\s*(?P<year>\d{4})\)"), _single),
    # (Smith & Jones, 2023)
    (
        "pair",
        re.compile(r"\((?P<author>[A-Z][a-z]+\s*&\s*[A-Z][a-z]+),\s*(?P<year>\d{4})\)"),
        lambda a: (parse_authors(a), False),
    ),
    # (Smith et al., 2023)
    (
        "et_al",
        re.compile(r"\((?P<author>[A-Z][a-z]+\s+et\s+al\.),\s*(?P<year>\d{4})\)"),
        split_et_al,
    ),
    # (Smith, 2023, p. 45)
    (
        "paged",
        re.compile(
            r"\((?P<author>[A-Z][a-z]+),\s*(?P<year>\d{4}),\s*p\.\s*(?P<pages>\d+)\)"
        ),
        _single,
    ),
    # (World Health Organization, 2023)
    (
        "organization",
        re.compile(r"\((?P<author>[A-Z][a-zA-Z\s]+),\s*(?P<year>\d{4})\)"),
        _organization,
    ),
]


def scan_bracketed_family(text: str) -> Iterator[InlineParenthetical]:
    """Yield bracketed citations pattern by pattern, in text order within each."""
    for _name, pattern, author_parser in BRACKETED_FAMILY:
        for m in pattern.finditer(text):
            authors, has_et_al = author_parser(m.group("author").strip())
            yield InlineParenthetical(
                raw_text=m.group(0),
                start=m.start(),
                style=CitationStyle.APA_INLINE,
                authors=authors,
                year=int(m.group("year")),
                has_et_al=has_et_al,
                pages=m.groupdict().get("pages"),
            )
