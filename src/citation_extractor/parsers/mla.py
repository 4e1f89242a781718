"""MLA (9th edition) full reference classifier.

Pattern: Author, First. "Title." Journal, vol. N, no. N, Year, pp. Pages.
"""

import re

from ..models import CitationStyle
from .base import BaseClassifier, FullBibliographic, parse_authors

_MLA_PATTERN = re.compile(
    r"^(?P<authors>[A-Z][^\"“\d]*?)\.\s*"  # Authors.
    r"[\"“](?P<title>[^\"“”]+?)[.,]?[\"”]\s*"  # "Title."
    r"(?P<journal>[^,\"“]+?),\s*"  # Journal,
    r"(?:vol\.\s*(?P<volume>\d+),?\s*)?"  # vol. N optional
    r"(?:no\.\s*(?P<issue>\d+),?\s*)?"  # no. N optional
    r"(?P<year>\d{4}),?\s*"  # Year
    r"(?:pp?\.\s*(?P<pages>\d+(?:\s*[–—-]\s*\d+)?))?"  # pp. Pages optional
)


class MLAClassifier(BaseClassifier):
    name = "mla"

    def classify(self, span: str) -> FullBibliographic | None:
        text = span.strip()
        m = _MLA_PATTERN.match(text)
        if not m:
            return None

        return FullBibliographic(
            raw_text=text,
            start=span.find(text),
            style=CitationStyle.MLA,
            authors=parse_authors(m.group("authors")),
            year=int(m.group("year")),
            title=m.group("title").strip(),
            journal=m.group("journal").strip() or None,
            volume=m.group("volume"),
            issue=m.group("issue"),
            pages=m.group("pages"),
        )
