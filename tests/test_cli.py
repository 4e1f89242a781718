"""Tests for the command-line interface."""

from click.testing import CliRunner

from citation_extractor.cli import main
from citation_extractor.models import CitationStatus, ExtractionResult
from citation_extractor.sources import crossref

CHAPTER = (
    "Prior studies (Smith, 2020) and (Brown, 2018) disagree [UNVERIFIED].\n"
    "\n"
    "References\n"
    "Smith, J. (2020). A Study of Things. Journal of Examples, 5(2), 100-110.\n"
    "Jones, K. (2019). Another Long Title. Some Journal, 3, 1-9.\n"
)


def _write_chapter(tmp_path, name="chapter.txt", content=CHAPTER):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def _extract(tmp_path):
    chapter = _write_chapter(tmp_path)
    output = tmp_path / "chapter_citations.json"
    result = CliRunner().invoke(main, ["extract", str(chapter), "-o", str(output)])
    assert result.exit_code == 0, result.output
    return output


class TestExtractCommand:
    def test_writes_json(self, tmp_path):
        output = _extract(tmp_path)
        extraction = ExtractionResult.model_validate_json(output.read_text())
        assert extraction.source == "chapter.txt"
        assert len(extraction.references) == 2
        assert extraction.summary.unverified == 1

    def test_reports_counts(self, tmp_path):
        chapter = _write_chapter(tmp_path)
        output = tmp_path / "out.json"
        result = CliRunner().invoke(main, ["extract", str(chapter), "-o", str(output)])
        assert "Extracted 5 mentions" in result.output
        assert "Reference entries: 2" in result.output

    def test_unsupported_file(self, tmp_path):
        chapter = _write_chapter(tmp_path, name="chapter.pdf")
        result = CliRunner().invoke(main, ["extract", str(chapter)])
        assert result.exit_code != 0


class TestCheckCommand:
    def test_lists_issues(self, tmp_path):
        chapter = _write_chapter(tmp_path)
        result = CliRunner().invoke(main, ["check", str(chapter)])
        assert result.exit_code == 0, result.output
        assert "1/2 references cited" in result.output
        assert "Issues found: 3" in result.output
        assert "[i] Reference 2 is never cited in the text" in result.output

    def test_html_heading_hint(self, tmp_path):
        chapter = _write_chapter(
            tmp_path,
            name="chapter.html",
            content="<p>Text (Smith, 2020).</p><h2>References</h2>"
            "<p>Smith, J. (2020). A Study of Things. Journal of Examples, 5(2), 100-110.</p>",
        )
        result = CliRunner().invoke(main, ["check", str(chapter)])
        assert "rerun with --strip-html" in result.output

        result = CliRunner().invoke(main, ["check", str(chapter), "--strip-html"])
        assert "1/1 references cited" in result.output


class TestVerifyCommand:
    def test_settles_mentions(self, tmp_path, monkeypatch):
        monkeypatch.setattr(crossref, "search", lambda mention: 0.95)
        extracted = _extract(tmp_path)
        output = tmp_path / "verified.json"
        result = CliRunner().invoke(main, ["verify", str(extracted), "-o", str(output)])
        assert result.exit_code == 0, result.output

        verified = ExtractionResult.model_validate_json(output.read_text())
        statuses = [m.status for m in verified.mentions]
        assert statuses.count(CitationStatus.VERIFIED) == 2
        assert statuses.count(CitationStatus.UNVERIFIED) == 1
        assert "Verified: 2" in result.output


class TestFormatCommand:
    def test_reference_style(self, tmp_path):
        extracted = _extract(tmp_path)
        result = CliRunner().invoke(main, ["format", str(extracted), "-s", "harvard"])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "Smith 2020," in lines[0]
        assert lines[-1].endswith("[UNVERIFIED - REQUIRES MANUAL REVIEW]")

    def test_inline(self, tmp_path):
        extracted = _extract(tmp_path)
        result = CliRunner().invoke(main, ["format", str(extracted), "--inline"])
        assert result.output.splitlines()[0] == "(Smith, 2020)"

    def test_rejects_unknown_style(self, tmp_path):
        extracted = _extract(tmp_path)
        result = CliRunner().invoke(main, ["format", str(extracted), "-s", "ieee"])
        assert result.exit_code != 0


class TestStatsCommand:
    def test_prints_counts(self, tmp_path):
        chapter = _write_chapter(tmp_path, content="One two three. Four five!\n\nSix seven?")
        result = CliRunner().invoke(main, ["stats", str(chapter), "--target-words", "14"])
        assert result.exit_code == 0, result.output
        assert "Words: 7" in result.output
        assert "Paragraphs: 2" in result.output
        assert "Completion: 50.0%" in result.output
