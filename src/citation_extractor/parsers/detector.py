"""Run the ordered classifier cascade over a single candidate span."""

import logging

from .apa import APAClassifier
from .base import BaseClassifier, Classification, Identified
from .fallback import FallbackClassifier
from .identifiers import IdentifierHit, find_identifiers, merge_hits
from .inline import BracketedClassifier, NarrativeClassifier
from .mla import MLAClassifier

logger = logging.getLogger(__name__)

# Fixed order: full forms before inline forms. First match wins.
CLASSIFIERS: list[BaseClassifier] = [
    APAClassifier(),
    MLAClassifier(),
    NarrativeClassifier(),
    BracketedClassifier(),
]
FALLBACK = FallbackClassifier()


def run_cascade(span: str) -> Classification:
    """Style cascade only. Spans no classifier recognises go to the fallback."""
    for classifier in CLASSIFIERS:
        result = classifier.classify(span)
        if result is not None:
            logger.debug("span classified by %s: %.60s", classifier.name, span)
            return result

    logger.debug("span fell through to fallback: %.60s", span)
    return FALLBACK.classify(span)


def covers(result: Classification, start: int, end: int) -> bool:
    """Whether [start, end) lies inside the classified match."""
    return result.start <= start and end <= result.start + len(result.raw_text)


def claim_identifiers(
    hits: list[IdentifierHit], result: Classification
) -> tuple[Identified | None, list[IdentifierHit]]:
    """Attach identifiers inside the match to it; return the rest unclaimed.

    Only the first identifier of each kind can be attached; repeats inside
    the match are returned as unclaimed too.
    """
    inside = [h for h in hits if covers(result, h.start, h.end)]
    outside = [h for h in hits if not covers(result, h.start, h.end)]
    identified, repeats = merge_hits(inside)
    return identified, sorted(outside + repeats, key=lambda h: h.start)


def classify_span(span: str) -> tuple[Identified | None, Classification]:
    """Classify a span.

    Identifier detection runs independently of the style cascade, but only
    identifiers inside the classified match are attached to it.
    """
    result = run_cascade(span)
    identified, _ = claim_identifiers(find_identifiers(span), result)
    return identified, result


def confidence_for(identified: Identified | None, result: Classification) -> float:
    """Combine branch confidences; a stronger signal is never lowered."""
    confidence = result.confidence
    if identified is not None:
        confidence = max(confidence, identified.confidence)
    return confidence
