"""Best-effort fallback for spans no style classifier recognised."""

import re

from .base import YEAR_TOKEN, BaseClassifier, Fallback, parse_authors

_QUOTED_TITLE = re.compile(r"[\"“]([^\"“”]+)[\"”]")
_ITALIC_TITLE = re.compile(r"<(i|em)>([^<]+)</\1>", re.IGNORECASE)
_LEADING_NAMES = re.compile(r"^(?:[A-Z][a-z]+(?:\s+[A-Z]\.)?,?\s*(?:(?:and|&)\s*)?)+")


class FallbackClassifier(BaseClassifier):
    name = "fallback"

    def classify(self, span: str) -> Fallback:
        text = span.strip()
        result = Fallback(raw_text=text, start=span.find(text))

        year = YEAR_TOKEN.search(text)
        if year:
            result.year = int(year.group(0))

        quoted = _QUOTED_TITLE.search(text)
        if quoted:
            result.title = quoted.group(1).strip()
        else:
            italic = _ITALIC_TITLE.search(text)
            if italic:
                result.title = italic.group(2).strip()

        names = _LEADING_NAMES.match(text)
        if names:
            result.authors = parse_authors(names.group(0))

        return result
