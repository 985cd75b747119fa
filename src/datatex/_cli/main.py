import logging
import re
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from datatex._errors import DatatexError
from datatex._helpers import HelperContext, HelperLibrary, Ref, render_value
from datatex._loader import DataFormat, dump_data, export_data, load_data_source
from datatex._resolve import Resolver, extract_expressions, resolve_tree
from datatex._value import KeyPath, ValueKind, value_kind

from .config import ConfigError, DatatexConfig, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

_NUMBER_ARGUMENT = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_ARGUMENT = re.compile(r"-?\d+")


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Datatex CLI: resolve computed values in TOML/JSON data sets."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
        force=True,
    )


def _fail(error: Exception) -> NoReturn:
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _load_config() -> DatatexConfig:
    try:
        return get_config()
    except ConfigError as e:
        _fail(e)


def _data_source(data: str | None, config: DatatexConfig) -> str:
    if data is not None:
        return data
    if config.data is not None:
        logger.debug(f"Using data file from config: {config.data}")
        return str(config.data)
    err_console.print("[red]Error: No data file given. Pass DATA or set [tool.datatex].data in pyproject.toml[/red]")
    raise typer.Exit(code=1)


def _parse_key(key: str) -> KeyPath:
    try:
        return KeyPath.parse(key)
    except ValueError as e:
        _fail(e)


@app.command()
def resolve(
    data: Annotated[
        str | None,
        typer.Argument(help="Path to a TOML/JSON data file, or '-' for JSON on stdin"),
    ] = None,
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to the output TOML/JSON file"),
    ] = None,
    output_format: Annotated[
        DataFormat | None,
        typer.Option("--format", help="Output format (default: from the output extension, JSON on stdout)"),
    ] = None,
) -> None:
    """Resolve every expression and write out the resolved data."""
    config = _load_config()
    source = _data_source(data, config)
    output = output if output is not None else config.output

    try:
        logger.debug(f"Loading data from {source}")
        resolved = resolve_tree(load_data_source(source))

        if output is None:
            typer.echo(dump_data(resolved, output_format or DataFormat.JSON), nl=False)
            return

        err_console.print(f"[cyan]Exporting resolved data to:[/cyan] {output}")
        if output_format is None:
            export_data(resolved, output)
        else:
            output.write_text(dump_data(resolved, output_format), encoding="utf-8")
    except (DatatexError, OSError) as e:
        _fail(e)

    err_console.print("[green]✓ Resolution complete[/green]")


@app.command()
def check(
    data: Annotated[
        str | None,
        typer.Argument(help="Path to a TOML/JSON data file, or '-' for JSON on stdin"),
    ] = None,
    *,
    key: Annotated[
        str | None,
        typer.Option("--key", "-k", help="Only show this expression and the expressions it is connected to"),
    ] = None,
) -> None:
    """Check that every expression resolves, and show them in resolution order."""
    config = _load_config()
    source = _data_source(data, config)

    try:
        tree = load_data_source(source)
        nodes = extract_expressions(tree)
        resolver = Resolver(tree, nodes)
        order = resolver.resolve()
    except (DatatexError, OSError) as e:
        _fail(e)

    if key is not None:
        key_path = _parse_key(key)
        if key_path not in resolver.graph:
            err_console.print(f"[red]Error: '{escape(key)}' is not an expression[/red]")
            raise typer.Exit(code=1)
        selected = {key_path} | resolver.graph.ancestors(key_path) | resolver.graph.descendants(key_path)
        order = [path for path in order if path in selected]

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Expression")
    table.add_column("Depends on", style="dim")
    table.add_column("Value", justify="right", style="green")

    for path in order:
        node = nodes[path]
        table.add_row(
            escape(str(path)),
            escape(node.text),
            escape(", ".join(str(dep) for dep in node.dependencies)),
            render_value(node.value),
        )

    err_console.print(
        Panel(
            table,
            title=f"[bold]Expressions: {escape(source)}[/bold]",
            subtitle=f"[dim]{len(order)} shown, {len(nodes)} total[/dim]",
            border_style="cyan",
        ),
    )
    err_console.print("[green]✓ All expressions resolve[/green]")


@app.command()
def get(
    data: Annotated[
        str,
        typer.Argument(help="Path to a TOML/JSON data file, or '-' for JSON on stdin"),
    ],
    key: Annotated[
        str,
        typer.Argument(help="Dotted key path, e.g. section.value"),
    ],
) -> None:
    """Print one value of the resolved data."""
    key_path = _parse_key(key)
    try:
        resolved = resolve_tree(load_data_source(data))
    except (DatatexError, OSError) as e:
        _fail(e)

    if key_path not in resolved:
        err_console.print(f"[red]Error: Unknown key '{escape(key)}'. Perhaps a key is misspelled?[/red]")
        raise typer.Exit(code=1)

    value = resolved[key_path]
    if value_kind(value) in (ValueKind.TABLE, ValueKind.ARRAY):
        out_console.print_json(data=_subtree(resolved.to_dict(), key_path))
    else:
        typer.echo(render_value(value))


def _subtree(data: Any, key_path: KeyPath) -> Any:
    for part in key_path.parts:
        data = data[int(part)] if isinstance(data, list) else data[part]
    return data


def _parse_helper_argument(arg: str) -> Any:
    """Interpret a command line helper argument.

    Numbers are passed as numbers, quoted text as a string and anything
    else as a key reference.
    """
    if _NUMBER_ARGUMENT.fullmatch(arg):
        return int(arg) if _INTEGER_ARGUMENT.fullmatch(arg) else float(arg)
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in "'\"":  # noqa: PLR2004
        return arg[1:-1]
    return Ref(arg)


@app.command()
def helper(
    data: Annotated[
        str,
        typer.Argument(help="Path to a TOML/JSON data file, or '-' for JSON on stdin"),
    ],
    name: Annotated[
        str,
        typer.Argument(help="Helper name: pm, round, roundup, sep, upper, lower or pow"),
    ],
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments: numbers, 'quoted text' or key paths"),
    ] = None,
) -> None:
    """Render one helper call against the resolved data, e.g. `helper data.toml pm 2 value`."""
    config = _load_config()
    try:
        resolved = resolve_tree(load_data_source(data))
        library = HelperLibrary(HelperContext(resolved, pair_separator=config.pair_separator))
        parsed = [_parse_helper_argument(arg) for arg in args or []]
        typer.echo(library.render(name, *parsed))
    except (DatatexError, OSError, ValueError) as e:
        _fail(e)


def main() -> None:
    app()
