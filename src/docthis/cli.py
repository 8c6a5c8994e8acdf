from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

import click
from pydantic import TypeAdapter

from docthis.config import iter_settings, load_settings
from docthis.edits import apply_edits
from docthis.engine import DocumentEngine
from docthis.errors import InternalError, UnsupportedLanguageError
from docthis.logger import logger, setup_logging
from docthis.models import EditOperation, Position, Range
from docthis.report import build_issue_report
from docthis.settings import DocThisSettings

T = TypeVar("T")

_EDITS = TypeAdapter(List[EditOperation])


def _load(config: Optional[Path]) -> DocThisSettings:
    if config is None:
        return load_settings()
    if config.suffix == ".json":
        return load_settings(json_file=str(config))
    return load_settings(toml_file=str(config))


def _read(path: Path) -> str:
    # keep line endings as they are on disk
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _language(settings: DocThisSettings, path: Path, language: Optional[str]) -> str:
    return language or settings.language_for_path(path.name) or path.suffix or path.name


def _execute(ctx: click.Context, command: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except UnsupportedLanguageError as ex:
        logger.debug("Unsupported language", language_id=ex.language_id)
        click.echo(
            f"Sorry! '{command}' currently supports JavaScript and TypeScript only.",
            err=True,
        )
        ctx.exit(1)
    except InternalError as ex:
        report = build_issue_report(ex, ex.action)
        click.echo(f"Sorry! '{ex.action}' encountered an error.", err=True)
        click.echo(report.title, err=True)
        click.echo(report.body, err=True)
        ctx.exit(2)


def _emit(
    path: Path,
    text: str,
    edits: List[EditOperation],
    write: bool,
    as_edits: bool,
) -> None:
    if as_edits:
        click.echo(_EDITS.dump_json(edits, indent=2).decode("utf-8"))
        return
    result = apply_edits(text, edits)
    if write:
        if result != text:
            _write(path, result)
        click.echo(f"{path}: {len(edits)} edit(s) applied.", err=True)
        return
    click.echo(result, nl=False)


_file_argument = click.argument(
    "file",
    type=click.Path(
        exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path
    ),
)
_language_option = click.option(
    "--language",
    type=str,
    default=None,
    help="Editor language id (default: derived from the file extension).",
)
_write_option = click.option(
    "--write", is_flag=True, default=False, help="Rewrite FILE in place."
)
_edits_option = click.option(
    "--edits",
    "as_edits",
    is_flag=True,
    default=False,
    help="Print the edit batch as JSON instead of the resulting text.",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML or JSON settings file.",
)
@click.option("--debug/--no-debug", default=False, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config: Optional[Path], debug: bool) -> None:
    """
    Generate JSDoc comments for JavaScript and TypeScript sources.
    """
    setup_logging(debug)
    ctx.obj = DocumentEngine(_load(config))


@main.command("this")
@_file_argument
@click.option("--line", type=click.IntRange(min=1), required=True, help="1-based line.")
@click.option(
    "--column", type=click.IntRange(min=1), default=1, help="1-based column."
)
@_language_option
@_write_option
@_edits_option
@click.pass_context
def document_this(
    ctx: click.Context,
    file: Path,
    line: int,
    column: int,
    language: Optional[str],
    write: bool,
    as_edits: bool,
) -> None:
    """
    Document the construct at LINE:COLUMN of FILE.
    """
    engine: DocumentEngine = ctx.obj
    text = _read(file)
    language_id = _language(engine.settings, file, language)
    edits = _execute(
        ctx,
        "Document This",
        lambda: engine.document_this(text, Position(line - 1, column - 1), language_id),
    )
    if edits is None:
        click.echo(f"{file}:{line}: nothing to document here.", err=True)
        edits = []
    _emit(file, text, edits, write, as_edits)


@main.command("everything")
@_file_argument
@click.option("--from-line", type=click.IntRange(min=1), default=None)
@click.option("--to-line", type=click.IntRange(min=1), default=None)
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Merge into existing comments instead of skipping documented nodes.",
)
@_language_option
@_write_option
@_edits_option
@click.pass_context
def document_everything(
    ctx: click.Context,
    file: Path,
    from_line: Optional[int],
    to_line: Optional[int],
    overwrite: Optional[bool],
    language: Optional[str],
    write: bool,
    as_edits: bool,
) -> None:
    """
    Document every undocumented construct in FILE, or only those starting
    between --from-line and --to-line.
    """
    engine: DocumentEngine = ctx.obj
    text = _read(file)
    language_id = _language(engine.settings, file, language)
    bounds = None
    if from_line is not None or to_line is not None:
        first = (from_line or 1) - 1
        last = (to_line - 1) if to_line is not None else text.count("\n")
        bounds = Range(Position(first, 0), Position(last, 0))
    edits = _execute(
        ctx,
        "Document Everything",
        lambda: engine.document_everything(
            text, language_id, bounds=bounds, overwrite_existing=overwrite
        ),
    )
    _emit(file, text, edits, write, as_edits)


@main.command("trace")
@_file_argument
@click.option("--line", type=click.IntRange(min=1), required=True, help="1-based line.")
@click.option(
    "--column", type=click.IntRange(min=1), default=1, help="1-based column."
)
@_language_option
@click.pass_context
def trace(
    ctx: click.Context,
    file: Path,
    line: int,
    column: int,
    language: Optional[str],
) -> None:
    """
    Print the syntax node at LINE:COLUMN of FILE and what it documents as.
    """
    engine: DocumentEngine = ctx.obj
    text = _read(file)
    language_id = _language(engine.settings, file, language)
    out = _execute(
        ctx,
        "Trace Syntax Node",
        lambda: engine.trace_node(text, Position(line - 1, column - 1), language_id),
    )
    click.echo(out)


@main.command("options")
def options() -> None:
    """
    List the available settings with their environment variables.
    """
    for opt in iter_settings(DocThisSettings):
        line = f"  {opt.flag:<40} {opt.env_var:<44} {opt.description}"
        if not opt.is_group:
            default = opt.default_value
            if isinstance(default, Enum):
                default = default.value
            line += f" [default: {default!r}]"
        click.echo(line)


if __name__ == "__main__":
    main()
