"""Citation extraction pipeline.

Turns chapter text (plain or HTML-tagged) into in-text citation mentions,
reference-list entries and a status summary. Every stage is best-effort:
malformed input degrades to low-confidence results or to omission, never to
an exception.
"""

import logging
import re
import time
from collections import Counter
from pathlib import Path
from typing import Iterator

from .models import (
    CitationMention,
    CitationStatus,
    CitationStyle,
    CitationSummary,
    ExtractionResult,
    Identifiers,
    ReferenceListEntry,
)
from .parsers import (
    Classification,
    Identified,
    IdentifierHit,
    canonical_author_key,
    claim_identifiers,
    confidence_for,
    find_identifiers,
    run_cascade,
    scan_bracketed_family,
    scan_narrative,
)
from .parsers.base import IDENTIFIER_CONFIDENCE, YEAR_TOKEN
from .parsers.identifiers import ARXIV_PATTERN, DOI_PATTERN, PUBMED_PATTERN
from .text import normalize_unicode, strip_tags

logger = logging.getLogger(__name__)

# Seconds allowed per call: a fixed allowance plus a per-character share
BASE_TIME_BUDGET = 2.0
PER_CHAR_TIME_BUDGET = 0.0001

MIN_REFERENCE_LENGTH = 20

UNVERIFIED_MARKER = "[UNVERIFIED]"
UNVERIFIED_NOTE = (
    "The text generator marked this citation as unverified due to "
    "uncertainty about the source."
)

SUPPORTED_SUFFIXES = {".txt", ".md", ".html", ".htm"}

# Line breaks and block-level HTML tags delimit candidate spans
_SPAN_BOUNDARY = re.compile(
    r"\r?\n|<br\s*/?>|</?(?:p|li|div|h[1-6]|blockquote|tr|td)(?:\s[^>]*)?>",
    re.IGNORECASE,
)

# Headings in priority order; the first one that matches is the only one used
REFERENCE_HEADINGS = [
    re.compile(
        heading + r"[ \t]*\r?\n\s*(?P<body>.*?)(?=\n[ \t]*\r?\n|\Z)",
        re.DOTALL,
    )
    for heading in ("References", "Bibliography", "Works Cited")
]

DedupKey = tuple[str, int]


def _iter_spans(text: str) -> Iterator[tuple[int, str]]:
    """Yield (offset, span) pairs between span boundaries."""
    pos = 0
    for m in _SPAN_BOUNDARY.finditer(text):
        yield pos, text[pos : m.start()]
        pos = m.end()
    yield pos, text[pos:]


def _has_citation_signal(span: str) -> bool:
    if YEAR_TOKEN.search(span):
        return True
    return any(p.search(span) for p in (DOI_PATTERN, PUBMED_PATTERN, ARXIV_PATTERN))


def _to_mention(
    identified: Identified | None, result: Classification, offset: int
) -> CitationMention:
    return CitationMention(
        raw_text=result.raw_text,
        style=result.style,
        authors=list(result.authors),
        year=result.year,
        has_et_al=result.has_et_al,
        identifiers=identified.identifiers if identified else Identifiers(),
        title=result.title,
        journal=result.journal,
        volume=result.volume,
        issue=result.issue,
        pages=result.pages,
        confidence=confidence_for(identified, result),
        position=offset + result.start,
    )


def _overlaps(a: Classification, b: Classification) -> bool:
    return a.start < b.start + len(b.raw_text) and b.start < a.start + len(a.raw_text)


def _identifier_mention(span: str, hit: IdentifierHit, offset: int) -> CitationMention:
    return CitationMention(
        raw_text=span[hit.start : hit.end],
        style=CitationStyle.UNKNOWN,
        identifiers=Identifiers(**{hit.kind: hit.value}),
        confidence=IDENTIFIER_CONFIDENCE,
        position=offset + hit.start,
    )


def _span_mentions(span: str, offset: int) -> list[CitationMention]:
    """Mentions found in one candidate span, in text order.

    The cascade classifies the span once. Further narrative citations and
    identifiers lying outside the classified match become mentions of their
    own.
    """
    result = run_cascade(span)
    identified, unclaimed = claim_identifiers(find_identifiers(span), result)
    mentions = [_to_mention(identified, result, offset)]

    for extra in scan_narrative(span):
        if not _overlaps(result, extra):
            mentions.append(_to_mention(None, extra, offset))

    mentions.extend(_identifier_mention(span, hit, offset) for hit in unclaimed)
    mentions.sort(key=lambda m: m.position)
    return mentions


def dedup_key(mention: CitationMention) -> DedupKey | None:
    """Key used to suppress repeated in-text mentions.

    Only author-date in-text mentions with both authors and a year have a
    key; full references, fallbacks and markers are never merged.
    """
    if mention.style != CitationStyle.APA_INLINE:
        return None
    if not mention.authors or mention.year is None:
        return None
    key = canonical_author_key(mention.authors, mention.has_et_al)
    if not key:
        return None
    return key, mention.year


class _MentionCollector:
    """Accumulates mentions for one call, dropping duplicate in-text keys."""

    def __init__(self) -> None:
        self.mentions: list[CitationMention] = []
        self._seen: set[DedupKey] = set()

    def add(self, mention: CitationMention) -> None:
        key = dedup_key(mention)
        if key is not None:
            if key in self._seen:
                logger.debug("Dropping duplicate mention %r", mention.raw_text)
                return
            self._seen.add(key)
        self.mentions.append(mention)


def _unverified_markers(text: str) -> list[CitationMention]:
    return [
        CitationMention(
            raw_text=UNVERIFIED_MARKER,
            style=CitationStyle.UNKNOWN,
            confidence=0.0,
            status=CitationStatus.UNVERIFIED,
            note=UNVERIFIED_NOTE,
            position=m.start(),
        )
        for m in re.finditer(re.escape(UNVERIFIED_MARKER), text)
    ]


def extract_mentions(
    text: str, time_budget: float | None = None
) -> list[CitationMention]:
    """Detect and classify citation mentions in a chapter.

    Output order: classified candidate spans (in text order), then the
    bracketed author-date family, then [UNVERIFIED] markers.
    """
    if not text or not text.strip():
        return []

    if time_budget is None:
        time_budget = BASE_TIME_BUDGET + len(text) * PER_CHAR_TIME_BUDGET
    deadline = time.monotonic() + time_budget
    collector = _MentionCollector()
    timed_out = False

    for offset, span in _iter_spans(text):
        if time.monotonic() > deadline:
            timed_out = True
            break
        if not span.strip() or not _has_citation_signal(span):
            continue
        for mention in _span_mentions(span, offset):
            collector.add(mention)

    if not timed_out:
        for result in scan_bracketed_family(text):
            if time.monotonic() > deadline:
                timed_out = True
                break
            collector.add(_to_mention(None, result, 0))

    if timed_out:
        logger.warning(
            "Citation extraction exceeded %.2fs on %d chars; remaining text skipped",
            time_budget,
            len(text),
        )

    mentions = collector.mentions + _unverified_markers(text)
    logger.info("Extracted %d citation mentions", len(mentions))
    return mentions


def extract_reference_list(text: str) -> list[ReferenceListEntry]:
    """Extract entries from the first References/Bibliography/Works Cited section."""
    if not text or not text.strip():
        return []

    for pattern in REFERENCE_HEADINGS:
        m = pattern.search(text)
        if not m:
            continue

        lines = [line.strip() for line in m.group("body").splitlines()]
        entries = [
            ReferenceListEntry(ordinal=i, text=line)
            for i, line in enumerate(
                (line for line in lines if len(line) > MIN_REFERENCE_LENGTH), start=1
            )
        ]
        logger.info("Found %d reference-list entries", len(entries))
        return entries

    logger.debug("No reference section heading found")
    return []


def summarize(mentions: list[CitationMention]) -> CitationSummary:
    """Count mentions by verification status."""
    counts = Counter(m.status.value for m in mentions)
    return CitationSummary(
        total=len(mentions),
        pending=counts.get("pending", 0),
        verified=counts.get("verified", 0),
        failed=counts.get("failed", 0),
        unverified=counts.get("unverified", 0),
    )


def extract(text: str, source: str = "<text>") -> ExtractionResult:
    """Run the full pipeline over one text."""
    mentions = extract_mentions(text)
    references = extract_reference_list(text)
    return ExtractionResult(
        source=source,
        mentions=mentions,
        references=references,
        summary=summarize(mentions),
    )


def extract_from_file(path: str | Path, strip_html: bool = False) -> ExtractionResult:
    """Read a chapter file and run the pipeline over it."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Chapter file not found: {path}")
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    text = normalize_unicode(path.read_text(encoding="utf-8"))
    if strip_html:
        text = strip_tags(text)

    result = extract(text, source=path.name)
    logger.info(
        "Processed %s: %d mentions, %d reference entries",
        path.name,
        len(result.mentions),
        len(result.references),
    )
    return result
