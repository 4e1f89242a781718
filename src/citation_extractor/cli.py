"""CLI entry point for the citation extraction pipeline.

Commands:
  citation-extractor extract <file>     Extract mentions and reference-list entries
  citation-extractor check <file>       Cross-check in-text citations against the list
  citation-extractor verify <json>      Settle pending citations via CrossRef
  citation-extractor format <json>      Print citations in a given style
  citation-extractor stats <file>       Word/paragraph/sentence statistics
"""

import logging
import sys
from pathlib import Path

import click

from .formatter import STYLES
from .models import CitationStatus, ExtractionResult


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(package_name="thesis-citation-extractor")
def main():
    """Citation extraction and checking for thesis chapters."""
    pass


@main.command()
@click.argument("chapter_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None)
@click.option("--strip-html", is_flag=True, help="Remove HTML tags before extraction")
@click.option("-v", "--verbose", is_flag=True)
def extract(chapter_path: Path, output: Path | None, strip_html: bool, verbose: bool):
    """Extract citation mentions and reference-list entries from a chapter."""
    _setup_logging(verbose)

    from .extractor import extract_from_file

    result = extract_from_file(chapter_path, strip_html=strip_html)

    output = output or Path(f"{chapter_path.stem}_citations.json")
    output.write_text(result.model_dump_json(indent=2))
    click.echo(f"Extracted {len(result.mentions)} mentions -> {output}")
    click.echo(f"  Reference entries: {len(result.references)}")
    click.echo(f"  Unverified markers: {result.summary.unverified}")


@main.command()
@click.argument("chapter_path", type=click.Path(exists=True, path_type=Path))
@click.option("--strip-html", is_flag=True, help="Remove HTML tags before extraction")
@click.option("-v", "--verbose", is_flag=True)
def check(chapter_path: Path, strip_html: bool, verbose: bool):
    """Cross-check in-text citations against the chapter's reference list."""
    _setup_logging(verbose)

    from .extractor import extract_from_file
    from .matcher import cross_check
    from .text import has_references_section

    result = extract_from_file(chapter_path, strip_html=strip_html)
    if not result.references and not strip_html:
        if has_references_section(chapter_path.read_text(encoding="utf-8")):
            click.echo("HTML references heading found; rerun with --strip-html", err=True)
    report = cross_check(result.mentions, result.references)

    click.echo(
        f"{report.matched_references}/{report.total_references} references cited, "
        f"{report.total_mentions} mentions"
    )
    click.echo(f"Issues found: {report.issues_found}")
    for issue in report.issues:
        icon = {"error": "X", "warning": "!", "info": "i"}[issue.severity.value]
        click.echo(f"  [{icon}] {issue.description}")


@main.command()
@click.argument("json_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None)
@click.option("-v", "--verbose", is_flag=True)
def verify(json_path: Path, output: Path | None, verbose: bool):
    """Settle pending citations of an extraction result against CrossRef."""
    _setup_logging(verbose)

    from .verifier import verify_result

    extraction = ExtractionResult.model_validate_json(json_path.read_text())
    result = verify_result(extraction)

    output = output or Path(f"{json_path.stem}_verified.json")
    output.write_text(result.model_dump_json(indent=2))

    click.echo(f"Verification complete -> {output}")
    click.echo(f"  Verified: {result.summary.verified}")
    click.echo(f"  Failed: {result.summary.failed}")
    click.echo(f"  Pending: {result.summary.pending}")
    click.echo(f"  Unverified: {result.summary.unverified}")


@main.command(name="format")
@click.argument("json_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-s", "--style",
    type=click.Choice(STYLES, case_sensitive=False),
    default="apa",
)
@click.option("--inline", is_flag=True, help="Print in-text citations instead of references")
def format_citations(json_path: Path, style: str, inline: bool):
    """Print the citations of an extraction result in a citation style."""
    from .formatter import format_inline, format_reference, placeholder

    extraction = ExtractionResult.model_validate_json(json_path.read_text())
    for mention in extraction.mentions:
        if mention.status == CitationStatus.UNVERIFIED:
            click.echo(placeholder(mention))
        elif inline:
            click.echo(format_inline(mention, style))
        else:
            click.echo(format_reference(mention, style))


@main.command()
@click.argument("chapter_path", type=click.Path(exists=True, path_type=Path))
@click.option("--target-words", type=int, default=None, help="Target word count")
def stats(chapter_path: Path, target_words: int | None):
    """Print word, paragraph and sentence statistics for a chapter."""
    from .text import analyze_content

    result = analyze_content(chapter_path.read_text(encoding="utf-8"), target_words)
    click.echo(f"Words: {result.word_count}")
    click.echo(f"Paragraphs: {result.paragraph_count}")
    click.echo(f"Sentences: {result.sentence_count}")
    click.echo(f"Reading time: {result.reading_time_minutes} min")
    if result.completion_percentage is not None:
        click.echo(f"Completion: {result.completion_percentage:.1f}%")
