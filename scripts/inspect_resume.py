#!/usr/bin/env python3
"""
Inspect how a resume is parsed.

Prints the normalized section list, the hierarchy map, invariant problems and
the result of a round-trip through the serializer.

Usage:
    python inspect_resume.py resume.md
    python inspect_resume.py resume.html --show-content
    python inspect_resume.py resume.md --export
"""

from pathlib import Path
from typing import Optional
from typing_extensions import Annotated

import typer
from dotenv import load_dotenv

from vitae.contexts.document.content_normalizer import normalize_sections
from vitae.contexts.document.hierarchy import SectionTree, check_hierarchy_consistency, document_problems
from vitae.contexts.intake import parse_resume_document
from vitae.contexts.intake.logger import setup_intake_logger
from vitae.contexts.rendering import check_roundtrip, export_resume
from vitae.contexts.rendering.converter import SUFFIX_HINTS
from vitae.utils.text_processing import truncate_display

load_dotenv()

app = typer.Typer(
    add_completion=False,
)


@app.command()
def main(
    input_file: Annotated[Path, typer.Argument(help="Raw resume file", exists=True, dir_okay=False)],
    hint: Annotated[
        Optional[str], typer.Option("--format", "-f", help="Input format: html, markdown or json")
    ] = None,
    show_content: Annotated[
        bool, typer.Option("--show-content", "-c", help="Print each section's content")
    ] = False,
    export: Annotated[bool, typer.Option("--export", "-e", help="Print the serialized document")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logs")] = False,
):
    """
    Show the parsed structure of a resume.
    """
    setup_intake_logger(source=str(input_file), console_level="DEBUG" if verbose else "WARNING")

    raw = input_file.read_text(encoding="utf-8")
    parsed = parse_resume_document(raw, hint=hint or SUFFIX_HINTS.get(input_file.suffix.lower()))
    tree = SectionTree(normalize_sections(parsed.sections))

    typer.secho(f"\n{input_file.name}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Format: {parsed.source_format}{' (fallback document)' if parsed.used_fallback else ''}")
    for warning in parsed.warnings:
        typer.secho(f"  ! {warning}", fg=typer.colors.YELLOW)

    typer.secho(f"\nSections ({len(tree)}):", bold=True)
    for section in tree:
        indent = "    " if section.parent_id else "  "
        marker = "*" if not tree.can_move(section) else "•"
        typer.echo(f"{indent}{marker} [{section.type.value}] {section.id}: {truncate_display(section.title)}")
        if show_content and section.content:
            typer.echo(f"{indent}    {truncate_display(section.content, width=100)}")

    typer.secho("\nHierarchy:", bold=True)
    for parent_id, children in tree.hierarchy.items():
        typer.echo(f"  {parent_id}: {', '.join(children)}")

    problems = document_problems(tree.sections) + check_hierarchy_consistency(tree.sections, tree.hierarchy)
    if problems:
        typer.secho("\nProblems:", fg=typer.colors.RED, bold=True)
        for problem in problems:
            typer.echo(f"  ✗ {problem}")

    document = export_resume(tree)
    stable, drift = check_roundtrip(document)
    if stable:
        typer.secho("\n✓ Round-trip stable", fg=typer.colors.GREEN)
    else:
        typer.secho(f"\n✗ Round-trip drift: {drift}", fg=typer.colors.YELLOW)

    if export:
        typer.secho("\nSerialized document:", bold=True)
        typer.echo(document)


if __name__ == "__main__":
    app()
