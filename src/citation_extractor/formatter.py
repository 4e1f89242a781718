"""Render citation mentions as reference-list entries or in-text citations.

Supported styles: apa (default), mla, chicago, harvard.
"""

import logging

from .models import CitationMention

logger = logging.getLogger(__name__)

STYLES = ("apa", "mla", "chicago", "harvard")
CITATION_NEEDED = "[Citation needed]"


def _initials(names: list[str]) -> str:
    return " ".join(f"{n[0].upper()}." for n in names if n)


def _last_first(author: str, initials: bool = True) -> str:
    """'Jane Q Smith' -> 'Smith, J. Q.' (or 'Smith, Jane Q')."""
    parts = author.split()
    if len(parts) < 2:
        return author
    *first, last = parts
    return f"{last}, {_initials(first) if initials else ' '.join(first)}"


def _first_last(author: str) -> str:
    """'Jane Q Smith' -> 'J. Q. Smith'."""
    parts = author.split()
    if len(parts) < 2:
        return author
    *first, last = parts
    return f"{_initials(first)} {last}"


def _join(names: list[str], conjunction: str, serial_comma: bool) -> str:
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} {conjunction} {names[1]}"
    comma = "," if serial_comma else ""
    return f"{', '.join(names[:-1])}{comma} {conjunction} {names[-1]}"


def _bare_title(title: str) -> str:
    return title.strip('."')


def _authors_apa(authors: list[str]) -> str:
    formatted = [_last_first(a) if i == 0 else _first_last(a) for i, a in enumerate(authors)]
    return _join(formatted, "&", serial_comma=True)


def _authors_mla(authors: list[str]) -> str:
    # Chicago uses the same author block
    formatted = [_last_first(a, initials=False) if i == 0 else a for i, a in enumerate(authors)]
    return _join(formatted, "and", serial_comma=True).rstrip(".") + "."


def _authors_harvard(authors: list[str]) -> str:
    formatted = [_last_first(a, initials=False) for a in authors]
    return _join(formatted, "&", serial_comma=False)


def _format_apa(m: CitationMention) -> str:
    parts = []
    if m.authors:
        parts.append(_authors_apa(m.authors))
    if m.year:
        parts.append(f"({m.year})")
    if m.title:
        parts.append(f"{m.title.strip('.')}.")
    if m.journal:
        journal = m.journal
        if m.volume:
            journal += f", {m.volume}"
            if m.issue:
                journal += f"({m.issue})"
        if m.pages:
            journal += f", {m.pages}"
        parts.append(f"{journal}.")
    if m.identifiers.doi:
        parts.append(f"https://doi.org/{m.identifiers.doi}")
    return " ".join(parts)


def _format_mla(m: CitationMention) -> str:
    parts = []
    if m.authors:
        parts.append(_authors_mla(m.authors))
    if m.title:
        parts.append('"%s."' % _bare_title(m.title))
    if m.journal:
        journal = m.journal
        if m.volume:
            journal += f" vol. {m.volume}"
            if m.issue:
                journal += f", no. {m.issue}"
        parts.append(f"{journal},")
    if m.year:
        year = str(m.year)
        if m.pages:
            year += f", pp. {m.pages}"
        parts.append(f"{year}.")
    return " ".join(parts)


def _format_chicago(m: CitationMention) -> str:
    parts = []
    if m.authors:
        parts.append(_authors_mla(m.authors))
    if m.title:
        parts.append('"%s."' % _bare_title(m.title))
    if m.journal:
        journal = m.journal
        if m.volume:
            journal += f" {m.volume}"
            if m.issue:
                journal += f", no. {m.issue}"
        if m.year:
            journal += f" ({m.year})"
            if m.pages:
                journal += f": {m.pages}"
        parts.append(f"{journal}.")
    if m.identifiers.doi:
        parts.append(f"https://doi.org/{m.identifiers.doi}.")
    return " ".join(parts)


def _format_harvard(m: CitationMention) -> str:
    parts = []
    if m.authors:
        parts.append(_authors_harvard(m.authors))
    if m.year:
        parts.append(f"{m.year},")
    if m.title:
        parts.append("'%s'," % _bare_title(m.title))
    if m.journal:
        journal = m.journal
        if m.volume:
            journal += f", vol. {m.volume}"
            if m.issue:
                journal += f", no. {m.issue}"
        if m.pages:
            journal += f", pp. {m.pages}"
        parts.append(f"{journal}.")
    return " ".join(parts)


_FORMATTERS = {
    "apa": _format_apa,
    "mla": _format_mla,
    "chicago": _format_chicago,
    "harvard": _format_harvard,
}


def format_reference(mention: CitationMention, style: str = "apa") -> str:
    """Format a mention as a reference-list entry. Unknown styles fall back to APA."""
    formatter = _FORMATTERS.get(style.lower())
    if formatter is None:
        logger.debug("Unknown style %r, formatting as APA", style)
        formatter = _format_apa
    return formatter(mention)


def format_inline(mention: CitationMention, style: str = "apa") -> str:
    """Format a mention as an in-text citation."""
    style = style.lower()
    authors = mention.authors
    lead = authors[0] if authors else ""
    if len(authors) == 1 and mention.has_et_al:
        names = f"{lead} et al."
    elif len(authors) == 1:
        names = lead
    elif len(authors) == 2:
        conjunction = "and" if style in ("mla", "chicago") else "&"
        names = f"{authors[0]} {conjunction} {authors[1]}"
    else:
        names = f"{lead} et al."

    if style == "mla":
        if not authors:
            return CITATION_NEEDED
        return f"({names} {mention.pages})" if mention.pages else f"({names})"

    if not authors or not mention.year:
        return CITATION_NEEDED
    if style == "chicago":
        pages = f", {mention.pages}" if mention.pages else ""
        return f"({names} {mention.year}{pages})"
    return f"({names}, {mention.year})"


def placeholder(mention: CitationMention) -> str:
    """Stand-in reference for a citation that could not be verified."""
    author = mention.authors[0] if mention.authors else "[Author needed]"
    year = mention.year or "[Year needed]"
    title = mention.title or "[Title needed]"
    return f"{author} ({year}). {title}. [UNVERIFIED - REQUIRES MANUAL REVIEW]"
