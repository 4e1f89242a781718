"""Pydantic data models shared across all pipeline stages.

These models serve double duty:
1. Data validation and serialization between stages
2. The JSON document written and read back by the CLI
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CitationStyle(str, Enum):
    APA = "apa"
    APA_INLINE = "apa_inline"
    MLA = "mla"
    UNKNOWN = "unknown"


class CitationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"
    UNVERIFIED = "unverified"


# --- Extraction ---


class Identifiers(BaseModel):
    """Structured reference keys that can be resolved independently of style."""

    doi: Optional[str] = None
    pubmed_id: Optional[str] = None
    arxiv_id: Optional[str] = None

    def any(self) -> bool:
        return bool(self.doi or self.pubmed_id or self.arxiv_id)


class CitationMention(BaseModel):
    """A single in-text occurrence of a citation."""

    raw_text: str = Field(description="Exact matched substring")
    style: CitationStyle = CitationStyle.UNKNOWN
    authors: list[str] = Field(default_factory=list)
    year: Optional[int] = None
    has_et_al: bool = False
    identifiers: Identifiers = Field(default_factory=Identifiers)
    title: Optional[str] = None
    journal: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: CitationStatus = CitationStatus.PENDING
    note: Optional[str] = None
    position: int = Field(0, description="Character offset of the match in the input")


class ReferenceListEntry(BaseModel):
    """A line taken from a detected References/Bibliography/Works Cited section."""

    ordinal: int = Field(ge=1, description="1-based position within the section")
    text: str
    status: CitationStatus = CitationStatus.PENDING


class CitationSummary(BaseModel):
    total: int = 0
    pending: int = 0
    verified: int = 0
    failed: int = 0
    unverified: int = 0


class ExtractionResult(BaseModel):
    """Output of one pipeline run over a chapter."""

    source: str = Field(description="File name or label of the analysed text")
    mentions: list[CitationMention]
    references: list[ReferenceListEntry]
    summary: CitationSummary


# --- Content analysis ---


class ContentStats(BaseModel):
    word_count: int
    character_count: int
    character_count_no_spaces: int
    paragraph_count: int
    sentence_count: int
    reading_time_minutes: float
    completion_percentage: Optional[float] = Field(
        None, description="Progress towards a target word count, capped at 100"
    )


# --- Cross-check ---


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class CrossCheckIssue(BaseModel):
    issue_type: str = Field(
        description="e.g. missing_from_list, uncited_reference, unverified_marker"
    )
    severity: IssueSeverity
    description: str
    mention_text: Optional[str] = Field(None, description="In-text citation involved")
    reference_ordinal: Optional[int] = None


class CrossCheckReport(BaseModel):
    issues: list[CrossCheckIssue]
    total_mentions: int
    total_references: int
    matched_references: int

    @property
    def issues_found(self) -> int:
        return len(self.issues)
