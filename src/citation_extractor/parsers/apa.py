"""APA full reference classifier.

Pattern: Author, A. A., & Author, B. B. (Year). Title. Journal, Vol(Issue), Pages. https://doi.org/...
"""

import re

from ..models import CitationStyle
from .base import BaseClassifier, FullBibliographic, parse_authors

# APA: LastName, F. M., ..., & LastName, F. M. (YYYY). Title. Journal, Vol(Iss), Pages. DOI
_APA_PATTERN = re.compile(
    r"^(?P<authors>[A-Z][^()\d]*?)\s*"  # Authors block
    r"\((?P<year>\d{4})[a-z]?\)\.\s*"  # (Year).
    r"(?P<title>.+?)\.\s+"  # Title.
    r"(?P<journal>[^,]+?)"  # Journal
    r"(?:,\s*(?P<volume>\d+))?"  # , Volume optional
    r"(?:\((?P<issue>[^)]+)\))?"  # (Issue) optional
    r"(?:,\s*(?P<pages>\d+(?:\s*[–—-]\s*\d+)?))?"  # , Pages optional
    r"\.?"
    r"(?:\s*(?:https?://\S+|doi:\s*\S+))?"  # DOI or URL optional
    r"\s*$"
)


class APAClassifier(BaseClassifier):
    name = "apa"

    def classify(self, span: str) -> FullBibliographic | None:
        text = span.strip()
        m = _APA_PATTERN.match(text)
        if not m:
            return None

        return FullBibliographic(
            raw_text=text,
            start=span.find(text),
            style=CitationStyle.APA,
            authors=parse_authors(m.group("authors")),
            year=int(m.group("year")),
            title=m.group("title").strip(". "),
            journal=m.group("journal").strip(". ") or None,
            volume=m.group("volume"),
            issue=m.group("issue"),
            pages=m.group("pages"),
        )
