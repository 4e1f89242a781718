"""Citation extraction, checking and formatting for thesis chapters."""

from .extractor import extract, extract_mentions, extract_reference_list, summarize

__all__ = ["extract", "extract_mentions", "extract_reference_list", "summarize"]
