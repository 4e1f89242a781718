"""CrossRef API client for citation verification.

Resolves DOIs directly, otherwise queries the CrossRef works API by title
and first author, then uses fuzzy string matching to compute a confidence
score.
"""

import logging
from typing import Optional

import httpx
from rapidfuzz import fuzz

from ..models import CitationMention

logger = logging.getLogger(__name__)

CROSSREF_API_URL = "https://api.crossref.org/works"
TIMEOUT = 30
USER_AGENT = "thesis-citation-extractor/0.1.0"


def _build_query_params(mention: CitationMention) -> dict:
    params: dict[str, str | int] = {
        "query.bibliographic": mention.title or mention.raw_text,
        "rows": 3,
    }
    if mention.authors:
        params["query.author"] = mention.authors[0]
    return params


def _item_year(item: dict) -> Optional[int]:
    published = item.get("published", {}).get("date-parts", [[None]])
    if published and published[0] and published[0][0]:
        return published[0][0]
    return None


def _compute_confidence(mention: CitationMention, item: dict) -> float:
    """Compute confidence score between a mention and a CrossRef result."""
    # DOI exact match = instant high confidence
    doi = mention.identifiers.doi
    if doi and item.get("DOI"):
        if doi.lower().strip() == item["DOI"].lower().strip():
            return 1.0

    api_titles = item.get("title", [])
    if not api_titles or not mention.title:
        return 0.0

    title_score = fuzz.token_sort_ratio(mention.title.lower(), api_titles[0].lower()) / 100.0

    year_bonus = 0.0
    if mention.year and _item_year(item) == mention.year:
        year_bonus = 0.05

    return min(title_score + year_bonus, 1.0)


def _get(url: str, params: Optional[dict] = None) -> httpx.Response:
    return httpx.get(
        url,
        params=params,
        timeout=TIMEOUT,
        headers={"User-Agent": USER_AGENT},
    )


def lookup_doi(doi: str) -> Optional[float]:
    """Resolve a DOI. Returns 1.0 if CrossRef knows it, 0.0 if not, None on failure."""
    try:
        response = _get(f"{CROSSREF_API_URL}/{doi}")
        if response.status_code == 404:
            return 0.0
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("CrossRef DOI lookup failed for '%s': %s", doi, e)
        return None
    return 1.0


def search(mention: CitationMention) -> Optional[float]:
    """Best match confidence for a mention. Returns None on API failure."""
    try:
        response = _get(CROSSREF_API_URL, params=_build_query_params(mention))
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("CrossRef API error for '%s': %s", mention.raw_text[:50], e)
        return None

    items = data.get("message", {}).get("items", [])
    if not items:
        return 0.0
    return max(_compute_confidence(mention, item) for item in items)
