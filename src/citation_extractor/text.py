"""Text cleanup and chapter content statistics."""

import html
import re

from .models import ContentStats

WORDS_PER_MINUTE = 200

_BLOCK_END = re.compile(r"<br\s*/?>|</(?:p|li|div|h[1-6]|blockquote|tr)>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WORD = re.compile(r"\b\w+\b", re.UNICODE)
_SENTENCE_END = re.compile(r"[.!?]+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

_REFERENCES_DIV = re.compile(r"<div[^>]*class=\"references-section\"[^>]*>", re.IGNORECASE)
_REFERENCES_HEADING = re.compile(r"<h[12][^>]*>\s*REFERENCES?\s*</h[12]>", re.IGNORECASE)
_REFERENCES_PARAGRAPH = re.compile(
    r"<p[^>]*>\s*(?:<strong[^>]*>|<b[^>]*>)?\s*REFERENCES?\s*(?:</strong>|</b>)?\s*</p>",
    re.IGNORECASE,
)


def normalize_unicode(text: str) -> str:
    """Normalize common typographic Unicode characters to ASCII.

    Curly quotes, en/em dashes, and ligatures are replaced with their ASCII
    equivalents so that regex classifiers work reliably on pasted text.
    """
    replacements = {
        "\u201c": '"',  # left double quotation mark
        "\u201d": '"',  # right double quotation mark
        "\u2018": "'",  # left single quotation mark
        "\u2019": "'",  # right single quotation mark
        "\u2013": "-",  # en dash
        "\u2014": "-",  # em dash
        "\u00a0": " ",  # non-breaking space
        "\ufb01": "fi",  # fi ligature
        "\ufb02": "fl",  # fl ligature
    }
    for old, new in replacements.items():
        text = text.replace(old, new)
    return text


def strip_tags(content: str) -> str:
    """Remove HTML tags, keeping block boundaries as line breaks."""
    content = _BLOCK_END.sub("\n", content)
    content = _TAG.sub("", content)
    return html.unescape(content)


def has_references_section(content: str) -> bool:
    """Check whether HTML chapter content already carries a references heading."""
    return bool(
        _REFERENCES_DIV.search(content)
        or _REFERENCES_HEADING.search(content)
        or _REFERENCES_PARAGRAPH.search(content)
    )


def word_count(content: str) -> int:
    clean = strip_tags(content).strip()
    if not clean:
        return 0
    return len(_WORD.findall(clean))


def paragraph_count(content: str) -> int:
    clean = strip_tags(content).replace("\r\n", "\n").replace("\r", "\n").strip()
    if not clean:
        return 0
    return len([p for p in _PARAGRAPH_BREAK.split(clean) if p.strip()])


def sentence_count(content: str) -> int:
    return len(_SENTENCE_END.findall(strip_tags(content)))


def analyze_content(content: str, target_words: int | None = None) -> ContentStats:
    """Word, character, paragraph and sentence statistics for a chapter."""
    words = word_count(content)
    completion = None
    if target_words is not None:
        completion = 0.0 if target_words <= 0 else min(100.0, words / target_words * 100)

    return ContentStats(
        word_count=words,
        character_count=len(content),
        character_count_no_spaces=len(re.sub(r"\s", "", content)),
        paragraph_count=paragraph_count(content),
        sentence_count=sentence_count(content),
        reading_time_minutes=round(words / WORDS_PER_MINUTE, 1),
        completion_percentage=completion,
    )
