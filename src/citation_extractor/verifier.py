"""Settle pending citations against CrossRef.

Only mentions carrying a DOI or a title can be looked up; bare author-date
mentions stay pending. Lookups that fail on the network also leave the
status untouched, so a later run can retry them.
"""

import logging
from collections import Counter

from .extractor import summarize
from .models import (
    CitationMention,
    CitationStatus,
    ExtractionResult,
    Identifiers,
    ReferenceListEntry,
)
from .parsers import classify_span, confidence_for
from .sources import crossref

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.85


def is_verifiable(mention: CitationMention) -> bool:
    if mention.status != CitationStatus.PENDING:
        return False
    return bool(mention.identifiers.doi or mention.title)


def _lookup(mention: CitationMention) -> float | None:
    if mention.identifiers.doi:
        found = crossref.lookup_doi(mention.identifiers.doi)
        if found:
            return found
        if not mention.title:
            return found
    return crossref.search(mention)


def verify_mention(mention: CitationMention) -> CitationMention:
    """Return a copy of the mention with its status settled, when possible."""
    if not is_verifiable(mention):
        return mention

    confidence = _lookup(mention)
    if confidence is None:
        return mention

    if confidence >= CONFIDENCE_THRESHOLD:
        status = CitationStatus.VERIFIED
    else:
        status = CitationStatus.FAILED
    logger.info("%s: %s (%.2f)", mention.raw_text[:60], status.value, confidence)
    return mention.model_copy(update={"status": status})


def verify_mentions(mentions: list[CitationMention]) -> list[CitationMention]:
    verified = []
    for i, mention in enumerate(mentions):
        logger.debug("Verifying mention %d/%d", i + 1, len(mentions))
        verified.append(verify_mention(mention))

    stats = Counter(m.status.value for m in verified)
    logger.info("Mention verification complete: %s", dict(stats))
    return verified


def _entry_as_mention(entry: ReferenceListEntry) -> CitationMention:
    identified, parsed = classify_span(entry.text)
    return CitationMention(
        raw_text=entry.text,
        style=parsed.style,
        authors=parsed.authors,
        year=parsed.year,
        identifiers=identified.identifiers if identified else Identifiers(),
        title=parsed.title,
        journal=parsed.journal,
        confidence=confidence_for(identified, parsed),
        status=entry.status,
    )


def verify_reference_entries(entries: list[ReferenceListEntry]) -> list[ReferenceListEntry]:
    settled = []
    for entry in entries:
        mention = verify_mention(_entry_as_mention(entry))
        settled.append(entry.model_copy(update={"status": mention.status}))
    return settled


def verify_result(result: ExtractionResult) -> ExtractionResult:
    """Verify every mention and reference entry of an extraction result."""
    mentions = verify_mentions(result.mentions)
    references = verify_reference_entries(result.references)
    return result.model_copy(
        update={
            "mentions": mentions,
            "references": references,
            "summary": summarize(mentions),
        }
    )
