"""DOI, PubMed and arXiv identifier detection.

Identifiers are looked for in every candidate span regardless of how (or
whether) the span is later classified by style. Every occurrence is
reported with its offsets so it can be tied to the citation that contains it.
"""

import re
from dataclasses import dataclass

from ..models import Identifiers
from .base import Identified

DOI_PATTERN = re.compile(r"10\.\d{4,}(?:\.\d+)*/[-._;()/:A-Za-z0-9]+")
PUBMED_PATTERN = re.compile(r"(?:PMID:?\s*)?\b(\d{7,8})\b")
ARXIV_PATTERN = re.compile(
    r"(?<![\d.])(?:arXiv:\s*)?(\d{4}\.\d{4,5}(?:v\d+)?)\b", re.IGNORECASE
)


@dataclass
class IdentifierHit:
    """One identifier occurrence. `kind` is an `Identifiers` field name."""

    kind: str
    value: str
    start: int
    end: int


def _clean_doi(doi: str) -> str:
    """Trim sentence punctuation and an unbalanced closing bracket."""
    while doi:
        if doi[-1] in ".,;:":
            doi = doi[:-1]
        elif doi[-1] == ")" and doi.count(")") > doi.count("("):
            doi = doi[:-1]
        else:
            break
    return doi


def find_identifiers(span: str) -> list[IdentifierHit]:
    """Return every identifier in a span, ordered by position."""
    hits = []
    for m in DOI_PATTERN.finditer(span):
        doi = _clean_doi(m.group(0))
        if doi:
            hits.append(IdentifierHit("doi", doi, m.start(), m.start() + len(doi)))

    # Keep DOI suffix digits from being read as PubMed or arXiv ids
    masked = DOI_PATTERN.sub(lambda m: " " * len(m.group(0)), span)
    for m in PUBMED_PATTERN.finditer(masked):
        hits.append(IdentifierHit("pubmed_id", m.group(1), m.start(), m.end()))
    for m in ARXIV_PATTERN.finditer(masked):
        hits.append(IdentifierHit("arxiv_id", m.group(1), m.start(), m.end()))

    hits.sort(key=lambda h: h.start)
    return hits


def merge_hits(hits: list[IdentifierHit]) -> tuple[Identified | None, list[IdentifierHit]]:
    """Fold hits into one `Identified`, keeping the first of each kind.

    Returns the merged result and the hits that did not fit (repeats of a
    kind already taken).
    """
    fields: dict[str, str] = {}
    leftover = []
    for hit in hits:
        if hit.kind in fields:
            leftover.append(hit)
        else:
            fields[hit.kind] = hit.value
    if not fields:
        return None, leftover
    return Identified(identifiers=Identifiers(**fields)), leftover


def detect_identifiers(span: str) -> Identified | None:
    """Return the first identifier of each kind present in a span, or None."""
    identified, _ = merge_hits(find_identifiers(span))
    return identified
