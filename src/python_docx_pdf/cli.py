"""Command-line interface for python-docx-pdf.

Provides commands for filling .docx templates and converting them to PDF.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .converters import CONVERTERS, ConverterSettings, get_converter
from .factory import open_template, save_pdf

app = typer.Typer(
    name="docx-pdf",
    help="Fill Word templates and convert them to PDF from the command line.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docx-pdf version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Fill Word templates and convert them to PDF from the command line."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@app.command()
def fill(
    file: Annotated[Path, typer.Argument(help="Path to the .docx template")],
    edits: Annotated[Path, typer.Argument(help="YAML or JSON edit file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    stop_on_error: Annotated[
        bool, typer.Option("--stop-on-error", help="Stop at the first failed edit")
    ] = False,
) -> None:
    """Apply the edits of an edit file to a template."""
    try:
        template = open_template(file)
        results = template.apply_edit_file(edits, stop_on_error=stop_on_error)
        for result in results:
            typer.echo(str(result))

        failed = [r for r in results if not r.success]
        if failed:
            typer.echo(f"Error: {len(failed)} of {len(results)} edit(s) failed", err=True)
            raise typer.Exit(1)

        output_path = template.save(output or file)
        typer.echo(f"Applied {len(results)} edit(s) and saved to {output_path}")
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("set-value")
def set_value(
    file: Annotated[Path, typer.Argument(help="Path to the .docx template")],
    name: Annotated[str, typer.Argument(help="Placeholder name (e.g. 'name' or '${name}')")],
    value: Annotated[str, typer.Argument(help="Replacement text")],
    limit: Annotated[
        int, typer.Option("--limit", "-l", help="Maximum replacements per part (-1 for all)")
    ] = -1,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Replace a placeholder with a value."""
    try:
        template = open_template(file)
        count = template.set_value(name, value, limit=limit)
        output_path = template.save(output or file)
        typer.echo(f"Replaced {count} occurrence(s) and saved to {output_path}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("clone-row")
def clone_row(
    file: Annotated[Path, typer.Argument(help="Path to the .docx template")],
    name: Annotated[str, typer.Argument(help="Placeholder inside the row to clone")],
    count: Annotated[int, typer.Argument(help="Number of rows to produce")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Repeat the table row holding a placeholder."""
    try:
        template = open_template(file)
        template.clone_row(name, count)
        output_path = template.save(output or file)
        typer.echo(f"Cloned row {count} time(s) and saved to {output_path}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("delete-block")
def delete_block(
    file: Annotated[Path, typer.Argument(help="Path to the .docx template")],
    name: Annotated[str, typer.Argument(help="Block name")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Remove a ${name} ... ${/name} block."""
    try:
        template = open_template(file)
        if not template.delete_block(name):
            typer.echo(f"Block '{name}' not found; nothing deleted")
            return
        output_path = template.save(output or file)
        typer.echo(f"Deleted block and saved to {output_path}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def placeholders(
    file: Annotated[Path, typer.Argument(help="Path to the .docx or .html template")],
) -> None:
    """List the placeholders of a template."""
    try:
        template = open_template(file)
        names = template.placeholders()
        if not names:
            typer.echo("No placeholders found")
            return
        for name in names:
            typer.echo(name)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def convert(
    file: Annotated[Path, typer.Argument(help="Path to the .docx or .html document")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="PDF path (default: next to FILE)")
    ] = None,
    converter: Annotated[
        str,
        typer.Option("--converter", "-c", help=f"Converter: {', '.join(CONVERTERS)}"),
    ] = "libreoffice",
    timeout: Annotated[
        int | None, typer.Option("--timeout", help="Conversion timeout in seconds")
    ] = None,
) -> None:
    """Convert a document to PDF."""
    try:
        settings = ConverterSettings()
        if timeout is not None:
            settings.timeout = timeout
        template = open_template(file, converter=get_converter(converter, settings))
        output_path = save_pdf(template, output)
        typer.echo(f"Saved PDF to {output_path}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
