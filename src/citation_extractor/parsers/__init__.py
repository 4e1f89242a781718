"""Rule-based classifiers for in-text citations and full references."""

from .apa import APAClassifier
from .base import (
    Classification,
    Fallback,
    FullBibliographic,
    Identified,
    InlineParenthetical,
    canonical_author_key,
    parse_authors,
)
from .detector import (
    CLASSIFIERS,
    claim_identifiers,
    classify_span,
    confidence_for,
    run_cascade,
)
from .fallback import FallbackClassifier
from .identifiers import IdentifierHit, detect_identifiers, find_identifiers
from .inline import (
    BracketedClassifier,
    NarrativeClassifier,
    scan_bracketed_family,
    scan_narrative,
)
from .mla import MLAClassifier

__all__ = [
    "APAClassifier",
    "BracketedClassifier",
    "CLASSIFIERS",
    "Classification",
    "Fallback",
    "FallbackClassifier",
    "FullBibliographic",
    "Identified",
    "IdentifierHit",
    "InlineParenthetical",
    "MLAClassifier",
    "NarrativeClassifier",
    "canonical_author_key",
    "claim_identifiers",
    "classify_span",
    "confidence_for",
    "detect_identifiers",
    "find_identifiers",
    "parse_authors",
    "run_cascade",
    "scan_bracketed_family",
    "scan_narrative",
]
