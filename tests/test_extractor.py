"""Tests for the extraction pipeline: mentions, reference lists and summaries."""

import pytest

from citation_extractor.extractor import (
    UNVERIFIED_MARKER,
    dedup_key,
    extract,
    extract_from_file,
    extract_mentions,
    extract_reference_list,
    summarize,
)
from citation_extractor.models import (
    CitationMention,
    CitationStatus,
    CitationStyle,
)

APA_LINE = "Smith, J. (2020). A Study of Things. Journal of Examples, 5(2), 100-110."

CHAPTER = (
    "Prior studies (Smith, 2020) and (Brown, 2018) disagree.\n"
    "\n"
    "References\n"
    + APA_LINE + "\n"
    "Jones, K. (2019). Another Long Title. Some Journal, 3, 1-9.\n"
    "Too short.\n"
    "Brown, L. (2018). Third Reference Title Here. Review, 2, 5-6.\n"
)


class TestExtractMentions:
    def test_doi_gives_identifier_confidence(self):
        mentions = extract_mentions("Recent results are reported in doi:10.5555/12345678 by the team.")
        assert len(mentions) == 1
        assert mentions[0].identifiers.doi == "10.5555/12345678"
        assert mentions[0].confidence >= 0.9

    def test_single_bracketed_mention(self):
        mentions = extract_mentions("(Smith, 2023)")
        assert len(mentions) == 1
        mention = mentions[0]
        assert mention.style == CitationStyle.APA_INLINE
        assert mention.authors == ["Smith"]
        assert mention.year == 2023
        assert mention.confidence == 0.6
        assert mention.position == 0
        assert mention.status == CitationStatus.PENDING

    def test_pair_and_single_are_distinct(self):
        text = "Early work (Smith & Jones, 2023) was extended later (Smith, 2023)."
        mentions = extract_mentions(text)
        assert [m.authors for m in mentions] == [["Smith", "Jones"], ["Smith"]]

    def test_repeated_mention_counted_once(self):
        text = "First (Smith, 2023).\nSecond (Smith, 2023)."
        mentions = extract_mentions(text)
        assert len(mentions) == 1
        assert mentions[0].position == 6

    def test_narrative_and_bracketed_forms_share_a_key(self):
        mentions = extract_mentions("Smith (2020) said so.\nIt was said (Smith, 2020).")
        assert len(mentions) == 1
        assert mentions[0].raw_text == "Smith (2020)"

    def test_full_apa_reference(self):
        mentions = extract_mentions(APA_LINE)
        mention = mentions[0]
        assert mention.style == CitationStyle.APA
        assert mention.year == 2020
        assert mention.title == "A Study of Things"
        assert mention.journal == "Journal of Examples"
        assert mention.confidence >= 0.7

    def test_identifier_inside_match_raises_confidence(self):
        mentions = extract_mentions(APA_LINE + " https://doi.org/10.1234/abc.5")
        assert len(mentions) == 1
        assert mentions[0].style == CitationStyle.APA
        assert mentions[0].identifiers.doi == "10.1234/abc.5"
        assert mentions[0].confidence == 0.9

    def test_identifier_outside_match_is_its_own_mention(self):
        mentions = extract_mentions("Smith (2020) PMID: 12345678")
        assert mentions[0].raw_text == "Smith (2020)"
        assert mentions[0].identifiers.pubmed_id is None
        assert mentions[0].confidence == 0.6
        assert mentions[1].raw_text == "PMID: 12345678"
        assert mentions[1].identifiers.pubmed_id == "12345678"
        assert mentions[1].confidence == 0.9
        assert mentions[1].position == 13

    def test_doi_not_attached_to_unrelated_inline_mention(self):
        mentions = extract_mentions("As argued by Lee (2019), see https://doi.org/10.1234/abcd.5678.")
        assert [(m.raw_text, m.identifiers.doi) for m in mentions] == [
            ("Lee (2019)", None),
            ("10.1234/abcd.5678", "10.1234/abcd.5678"),
        ]
        assert mentions[1].style == CitationStyle.UNKNOWN
        assert mentions[1].confidence == 0.9

    def test_every_doi_on_a_line_is_kept(self):
        mentions = extract_mentions(
            "Data came from 10.1000/abc123 and from 10.2000/xyz789 in 2020."
        )
        assert [m.identifiers.doi for m in mentions] == ["10.1000/abc123", "10.2000/xyz789"]
        assert all(m.confidence >= 0.9 for m in mentions)

    def test_every_narrative_citation_on_a_line(self):
        mentions = extract_mentions("Smith (2020) and Jones (2021) both argue this.")
        assert [(m.authors, m.year) for m in mentions] == [(["Smith"], 2020), (["Jones"], 2021)]
        assert mentions[1].position == 17

    def test_later_narrative_citations_are_deduplicated(self):
        text = "Smith (2020) and Jones (2021) agree, as does Smith (2020) again (Jones, 2021)."
        mentions = extract_mentions(text)
        assert [m.raw_text for m in mentions] == ["Smith (2020)", "Jones (2021)"]

    def test_unrecognised_span_uses_fallback(self):
        mentions = extract_mentions("In 2020 the policy changed.")
        assert len(mentions) == 1
        assert mentions[0].style == CitationStyle.UNKNOWN
        assert mentions[0].confidence == 0.3
        assert mentions[0].year == 2020

    def test_lines_without_signal_are_skipped(self):
        assert extract_mentions("No citations here.\nNor here.") == []

    def test_html_blocks_are_spans(self):
        text = f"<p>{APA_LINE}</p><p>Later (Jones, 2019).</p>"
        mentions = extract_mentions(text)
        assert len(mentions) == 2
        assert mentions[0].style == CitationStyle.APA
        assert mentions[0].position == 3
        assert mentions[1].authors == ["Jones"]

    def test_family_scan_runs_after_cascade(self):
        # Only the first citation inside a bracket is read by the cascade
        mentions = extract_mentions("See (Smith, 2020; Brown, 2018) and (Lee, 2017).")
        assert [m.authors for m in mentions] == [["Smith"], ["Lee"]]

    def test_unverified_markers_come_last(self):
        text = f"A claim {UNVERIFIED_MARKER} and (Smith, 2023) {UNVERIFIED_MARKER}."
        mentions = extract_mentions(text)
        assert mentions[0].authors == ["Smith"]
        markers = mentions[1:]
        assert len(markers) == 2
        for marker in markers:
            assert marker.raw_text == UNVERIFIED_MARKER
            assert marker.status == CitationStatus.UNVERIFIED
            assert marker.confidence == 0.0
            assert marker.authors == []
            assert marker.year is None
            assert "unverified" in marker.note
        assert markers[0].position == 8

    def test_exhausted_time_budget_keeps_markers(self):
        mentions = extract_mentions(f"(Smith, 2023) {UNVERIFIED_MARKER}", time_budget=-1.0)
        assert len(mentions) == 1
        assert mentions[0].status == CitationStatus.UNVERIFIED

    def test_idempotent(self):
        assert extract_mentions(CHAPTER) == extract_mentions(CHAPTER)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
    def test_empty_input(self, text):
        assert extract_mentions(text) == []
        assert extract_reference_list(text) == []


class TestDedupKey:
    def test_full_references_have_no_key(self):
        mention = CitationMention(raw_text="x", style=CitationStyle.APA, authors=["Smith"], year=2020)
        assert dedup_key(mention) is None

    def test_inline_without_year_has_no_key(self):
        mention = CitationMention(raw_text="x", style=CitationStyle.APA_INLINE, authors=["Smith"])
        assert dedup_key(mention) is None

    def test_et_al_is_part_of_key(self):
        mention = CitationMention(
            raw_text="x",
            style=CitationStyle.APA_INLINE,
            authors=["Smith"],
            year=2020,
            has_et_al=True,
        )
        assert dedup_key(mention) == ("smith+et-al", 2020)


class TestExtractReferenceList:
    def test_short_lines_dropped(self):
        entries = extract_reference_list(CHAPTER)
        assert [e.ordinal for e in entries] == [1, 2, 3]
        assert entries[0].text == APA_LINE
        assert entries[2].text.startswith("Brown, L.")
        assert all(e.status == CitationStatus.PENDING for e in entries)

    def test_heading_priority(self):
        text = (
            "Bibliography\n"
            "An entry under the bibliography heading.\n"
            "\n"
            "References\n"
            "An entry under the references heading.\n"
        )
        entries = extract_reference_list(text)
        assert len(entries) == 1
        assert entries[0].text == "An entry under the references heading."

    def test_works_cited(self):
        entries = extract_reference_list("Works Cited\nSmith, John. A Long Book Title. 2001.\n")
        assert len(entries) == 1

    def test_blank_line_ends_section(self):
        text = (
            "References\n"
            "A long reference entry number one here.\n"
            "\n"
            "Appendix A\n"
            "Something long enough to count here.\n"
        )
        assert len(extract_reference_list(text)) == 1

    def test_blank_line_after_heading(self):
        text = (
            "References\n"
            "\n"
            "A long reference entry number one here.\n"
            "A long reference entry number two here.\n"
        )
        assert len(extract_reference_list(text)) == 2

    def test_no_heading(self):
        assert extract_reference_list("Some text (Smith, 2020).") == []


class TestSummarize:
    def test_counts_by_status(self):
        mentions = [
            CitationMention(raw_text="a"),
            CitationMention(raw_text="b", status=CitationStatus.VERIFIED),
            CitationMention(raw_text="c", status=CitationStatus.FAILED),
            CitationMention(raw_text="d", status=CitationStatus.UNVERIFIED),
            CitationMention(raw_text="e"),
        ]
        assert summarize(mentions).model_dump() == {
            "total": 5,
            "pending": 2,
            "verified": 1,
            "failed": 1,
            "unverified": 1,
        }

    def test_empty(self):
        assert summarize([]).total == 0


class TestExtract:
    def test_full_pipeline(self):
        result = extract(CHAPTER, source="chapter.txt")
        assert result.source == "chapter.txt"
        assert len(result.references) == 3
        assert result.summary.total == len(result.mentions)
        assert result.summary.pending == len(result.mentions)

    def test_from_file_strips_html(self, tmp_path):
        path = tmp_path / "chapter.html"
        path.write_text(
            "<p>Text (Smith, 2020).</p><h2>References</h2>"
            f"<p>{APA_LINE}</p>",
            encoding="utf-8",
        )
        result = extract_from_file(path, strip_html=True)
        assert result.source == "chapter.html"
        assert len(result.references) == 1
        assert result.mentions[0].authors == ["Smith"]

    def test_from_file_normalizes_quotes(self, tmp_path):
        path = tmp_path / "chapter.txt"
        path.write_text(
            "Smith, John. \u201cA Study of Things.\u201d Journal of Examples, 2020, pp. 1\u20139.",
            encoding="utf-8",
        )
        result = extract_from_file(path)
        assert result.mentions[0].style == CitationStyle.MLA
        assert result.mentions[0].pages == "1-9"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            extract_from_file(tmp_path / "nope.txt")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "chapter.pdf"
        path.write_bytes(b"%PDF-1.4")
        with pytest.raises(ValueError, match="Unsupported"):
            extract_from_file(path)
