"""Cross-check in-text citations against the chapter's reference list.

Rule-based: every author-date mention should resolve to a reference entry
with the same first author and year, and every reference entry should be
cited at least once. Author names are compared with rapidfuzz so that
small spelling or diacritic differences still match.
"""

import logging
import re

from rapidfuzz import fuzz

from .models import (
    CitationMention,
    CitationStatus,
    CitationStyle,
    CrossCheckIssue,
    CrossCheckReport,
    IssueSeverity,
    ReferenceListEntry,
)
from .parsers import classify_span

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 85

_NON_NAME_CHARS = re.compile(r"[^\w\s'-]")


def normalize_author_name(name: str) -> str:
    name = _NON_NAME_CHARS.sub(" ", name)
    return " ".join(name.split()).lower()


def authors_match(author1: str, author2: str) -> bool:
    """Same person if names are equal, or surnames agree and initials are compatible."""
    norm1 = normalize_author_name(author1)
    norm2 = normalize_author_name(author2)
    if not norm1 or not norm2:
        return False
    if norm1 == norm2:
        return True

    parts1 = norm1.split()
    parts2 = norm2.split()
    if fuzz.ratio(parts1[-1], parts2[-1]) < MATCH_THRESHOLD:
        return False
    if len(parts1) == 1 or len(parts2) == 1:
        # Surname-only form, as in most in-text citations
        return True

    first1, first2 = parts1[0], parts2[0]
    if len(first1) == 1 or len(first2) == 1:
        return first1[0] == first2[0]
    return first1 == first2


def _entry_key(entry: ReferenceListEntry) -> tuple[list[str], int | None]:
    _, parsed = classify_span(entry.text)
    return parsed.authors, parsed.year


def _matches(mention: CitationMention, authors: list[str], year: int | None, text: str) -> bool:
    if mention.year is None or year != mention.year:
        return False
    lead = mention.authors[0]
    if authors and authors_match(lead, authors[0]):
        return True
    # Unparsed entry: look for the surname near the start of the line
    head = text[: max(len(lead) * 4, 60)].lower()
    return fuzz.partial_ratio(normalize_author_name(lead), head) >= MATCH_THRESHOLD


def cross_check(
    mentions: list[CitationMention], references: list[ReferenceListEntry]
) -> CrossCheckReport:
    """Report in-text citations missing from the list and uncited list entries."""
    issues: list[CrossCheckIssue] = []
    in_text = [
        m for m in mentions
        if m.style == CitationStyle.APA_INLINE and m.authors and m.year is not None
    ]
    keys = [_entry_key(entry) for entry in references]
    cited: set[int] = set()

    if in_text and not references:
        issues.append(
            CrossCheckIssue(
                issue_type="missing_reference_list",
                severity=IssueSeverity.ERROR,
                description=(
                    f"{len(in_text)} in-text citations found but no reference "
                    "section was detected"
                ),
            )
        )

    for mention in in_text:
        hits = [
            entry.ordinal
            for entry, (authors, year) in zip(references, keys)
            if _matches(mention, authors, year, entry.text)
        ]
        cited.update(hits)
        if references and not hits:
            issues.append(
                CrossCheckIssue(
                    issue_type="missing_from_list",
                    severity=IssueSeverity.WARNING,
                    description=(
                        f"{mention.raw_text} does not match any reference-list entry"
                    ),
                    mention_text=mention.raw_text,
                )
            )

    for entry in references:
        if entry.ordinal not in cited:
            issues.append(
                CrossCheckIssue(
                    issue_type="uncited_reference",
                    severity=IssueSeverity.INFO,
                    description=f"Reference {entry.ordinal} is never cited in the text",
                    reference_ordinal=entry.ordinal,
                )
            )

    for mention in mentions:
        if mention.status == CitationStatus.UNVERIFIED:
            issues.append(
                CrossCheckIssue(
                    issue_type="unverified_marker",
                    severity=IssueSeverity.WARNING,
                    description=mention.note or "Citation flagged as unverified",
                    mention_text=mention.raw_text,
                )
            )

    logger.info(
        "Cross-check: %d in-text citations, %d/%d references cited, %d issues",
        len(in_text),
        len(cited),
        len(references),
        len(issues),
    )
    return CrossCheckReport(
        issues=issues,
        total_mentions=len(mentions),
        total_references=len(references),
        matched_references=len(cited),
    )
