#!/usr/bin/env python3
"""
Command-line interface for resume conversion.

Subcommands:
- convert: Parse a raw resume (Markdown, HTML, JSON) and write the serialized
  document plus an optional JSON mirror
- presets: List available export presets
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv

from vitae.contexts.intake.heuristics import load_heuristics
from vitae.contexts.rendering import ExportOptions, convert_resume, load_export_presets
from vitae.utils.logger import default_log_dir

load_dotenv()

app = typer.Typer(
    add_completion=False,
    help="Convert raw resumes into the renderer's Markdown/HTML dialect",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("convert")
def convert_command(
    input_file: Path = typer.Argument(
        ...,
        help="Raw resume (.md, .html, .json, .txt)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Serialized document path (default: <input>.resume.md)",
    ),
    json_output: Optional[Path] = typer.Option(
        None,
        "--json",
        "-j",
        help="Also write the structured JSON mirror to this path",
    ),
    preset: List[str] = typer.Option(
        [],
        "--preset",
        "-p",
        help="Export preset, repeatable (e.g. -p summary_implied -p layout_uppercase)",
    ),
    suppress: List[str] = typer.Option(
        [],
        "--suppress",
        "-s",
        help="Section title to print without its heading, repeatable",
    ),
    hint: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Input format: html, markdown or json (default: from file suffix)",
    ),
    title_keyword: List[str] = typer.Option(
        [],
        "--title-keyword",
        "-k",
        help="Extra job-title keyword for role splitting, repeatable (e.g. -k barista)",
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir",
        help="Directory for the log file (default: timestamped dir under LOGS_PATH)",
    ),
    no_roundtrip: bool = typer.Option(
        False,
        "--no-roundtrip",
        help="Skip the round-trip stability check",
    ),
):
    """
    Convert one resume file.

    Examples:\n

        $ convert_resume.py convert resume.md

        $ convert_resume.py convert resume.html -o out/resume.md -j out/resume.json

        $ convert_resume.py convert resume.md -p summary_implied -k barista -k founder
    """
    try:
        options = ExportOptions.from_presets(list(preset))
    except ValueError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    options.suppressed_titles.extend(suppress)

    heuristics = load_heuristics()
    if title_keyword:
        heuristics = heuristics.with_title_keywords(title_keyword)

    typer.secho(f"\nConverting: {input_file.name}", fg=typer.colors.BLUE, bold=True)

    result = convert_resume(
        input_file,
        output_path=output,
        json_output_path=json_output,
        options=options,
        hint=hint,
        heuristics=heuristics,
        log_dir=log_dir or default_log_dir("convert"),
        verify_roundtrip=not no_roundtrip,
    )

    if not result.success:
        typer.secho(f"\n✗ Conversion failed: {result.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Format: {result.source_format}")
    typer.echo(f"Sections: {result.section_count}")
    if result.used_fallback:
        typer.secho("Input was unusable, wrote the default document", fg=typer.colors.YELLOW)
    if result.roundtrip_stable is False:
        typer.secho(f"Round-trip drift: {result.roundtrip_drift}", fg=typer.colors.YELLOW)

    typer.secho(f"\n✓ Success! Document saved to: {result.output_path}", fg=typer.colors.GREEN)
    if result.json_output_path:
        typer.echo(f"JSON mirror: {result.json_output_path}")
    typer.echo(f"Time: {result.time_s:.2f}s")


@app.command("presets")
def presets_command():
    """
    List available export presets.

    Example:\n

        $ convert_resume.py presets
    """
    presets = load_export_presets()
    typer.secho(f"\nExport presets ({len(presets)}):", fg=typer.colors.BLUE, bold=True)
    for name, config in presets.items():
        settings = ", ".join(f"{key}={value}" for key, value in config.items())
        typer.echo(f"  • {name}: {settings}")


if __name__ == "__main__":
    app()
