"""
idml-bridge Command Line Interface.

Provides commands for extracting text from IDML files and writing
translations back.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .errors import IDMLBridgeError
from .languages import FormattingResolver, LanguageTable
from .merger import parse_translation_records
from .package import IDMLPackage
from .rewriter import DocumentRewriter
from .workflow import extract_text_units, language_warnings, localize, select_units

app = typer.Typer(
    name="idml-bridge",
    help="IDML text extraction and translation re-injection",
    add_completion=False,
)

LANGUAGES_ENVVAR = "IDML_BRIDGE_LANGUAGES"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load_table(languages_file: Optional[Path]) -> LanguageTable:
    if languages_file is None:
        return LanguageTable()
    return LanguageTable.from_yaml(languages_file)


def _fail(error: Exception) -> None:
    typer.secho(f"✗ Error: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command()
def extract(
    input_file: Path = typer.Argument(..., help="Input IDML file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write units as JSON here instead of stdout"
    ),
    start: Optional[int] = typer.Option(None, "--start", help="First unit index (inclusive)"),
    end: Optional[int] = typer.Option(None, "--end", help="Last unit index (inclusive)"),
    source_language: str = typer.Option("en", "--source", "-s", help="Source language code"),
    target_language: Optional[str] = typer.Option(
        None, "--target", "-t", help="Target language code (enables language warnings)"
    ),
    languages_file: Optional[Path] = typer.Option(
        None, "--languages", envvar=LANGUAGES_ENVVAR, help="YAML language table overlay"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Extract translatable text units from an IDML file.

    Example:
        idml-bridge extract brochure.idml --target fa -o units.json
    """
    _setup_logging(verbose)

    try:
        table = _load_table(languages_file)
        package = IDMLPackage.from_path(input_file)
        units = select_units(extract_text_units(package), start, end)
    except IDMLBridgeError as e:
        _fail(e)

    if target_language:
        for warning in language_warnings(source_language, target_language, table):
            typer.secho(f"⚠ {warning}", fg=typer.colors.YELLOW, err=True)

    payload = json.dumps([unit.to_dict() for unit in units], ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(payload)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        typer.secho(f"✓ {len(units)} text units written to {output}", fg=typer.colors.GREEN, err=True)


@app.command()
def apply(
    input_file: Path = typer.Argument(..., help="Original IDML file"),
    translations_file: Path = typer.Argument(..., help="Translations JSON"),
    output_file: Path = typer.Argument(..., help="Output IDML file"),
    target_language: str = typer.Option(..., "--lang", "-l", help="Target language code"),
    languages_file: Optional[Path] = typer.Option(
        None, "--languages", envvar=LANGUAGES_ENVVAR, help="YAML language table overlay"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Write translated text back into an IDML file.

    The translations file is either a JSON object mapping unit id to text, or
    a list of records with "id" and "translatedContent" (or "content").

    Example:
        idml-bridge apply brochure.idml translations.json brochure_fa.idml --lang fa
    """
    _setup_logging(verbose)

    try:
        table = _load_table(languages_file)
        package = IDMLPackage.from_path(input_file)
        records = json.loads(translations_file.read_text(encoding="utf-8"))
        rewriter = DocumentRewriter(FormattingResolver(table))
        result = localize(package, parse_translation_records(records), target_language, rewriter)
    except (IDMLBridgeError, OSError, ValueError) as e:
        _fail(e)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(result.data)

    report = result.report
    typer.secho("✓ Translation applied!", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"Text units: {report['original_unit_count']}")
    typer.echo(f"Translated: {report['translated_unit_count']}")
    typer.echo(f"Output: {output_file}")


@app.command()
def languages(
    languages_file: Optional[Path] = typer.Option(
        None, "--languages", envvar=LANGUAGES_ENVVAR, help="YAML language table overlay"
    ),
):
    """List known languages with direction and expansion factor."""
    try:
        table = _load_table(languages_file)
    except IDMLBridgeError as e:
        _fail(e)

    for language in sorted(table, key=lambda lang: lang.code):
        direction = "RTL" if language.is_rtl else "LTR"
        typer.echo(
            f"{language.code:<4} {language.name:<24} {direction}  x{language.expansion_factor:.2f}"
        )


def main():
    app()


if __name__ == "__main__":
    main()
