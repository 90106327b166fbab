import json
import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from livevars._evaluator import EvaluationResult, VariableEvaluator
from livevars._parser import ExpressionParser, ParseNode

from .config import ConfigError, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Livevars CLI."""
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
    )


def parse_assignment(assignment: str) -> tuple[str, Any]:
    """Parse a ``name=value`` command line assignment.

    The value is read as a TOML literal when possible (``count=3``, ``tags=["a"]``),
    otherwise it is kept as a plain string.

    Raises:
        typer.BadParameter: If there is no ``=`` or the name is empty.

    """
    name, sep, raw_value = assignment.partition("=")
    name = name.strip()
    if not sep or not name:
        msg = f"Expected name=value, got: {assignment!r}"
        raise typer.BadParameter(msg)

    try:
        value = tomllib.loads(f"value = {raw_value}")["value"]
    except tomllib.TOMLDecodeError:
        value = raw_value
    return name, value


def load_variables_file(path: Path) -> dict[str, Any]:
    """Load variables from a TOML file. Top level keys are variable names.

    Raises:
        ConfigError: If the file is missing or is not valid TOML.

    """
    if not path.is_file():
        msg = f"Variables file not found: {path}"
        raise ConfigError(msg)

    with path.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise ConfigError(msg) from e


def build_parse_tree(node: ParseNode, expression: str, tree: Tree | None = None) -> Tree:
    """Render a parse tree as a rich Tree."""
    label = f"[bold]{node.type}[/bold] [dim]{node.start}..{node.end}[/dim] {escape(repr(node.source(expression)))}"
    if node.error is not None:
        label += f" [red]{escape(node.error)}[/red]"

    branch = Tree(label) if tree is None else tree.add(label)
    for child in node.children:
        build_parse_tree(child, expression, branch)
    return branch


def export_result_to_toml(
    expression: str,
    result: EvaluationResult[Any],
    variable_names: tuple[str, ...],
    output: Path,
) -> None:
    """Write an evaluation result to a TOML file. Missing values are omitted."""
    data: dict[str, Any] = {"expression": expression, "variables": list(variable_names)}
    if result.success:
        data["value"] = result.value
    else:
        data["error"] = result.error

    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("wb") as f:
        tomli_w.dump(data, f)


@app.command()
def parse(
    expression: Annotated[str, typer.Argument(help="Variable expression, e.g. 'Hello ${user.name}'")],
    *,
    as_json: Annotated[bool, typer.Option("--json", help="Print the parse tree as JSON")] = False,
) -> None:
    """Show the parse tree of a variable expression."""
    root = ExpressionParser(expression).parse()

    if as_json:
        out_console.print_json(root.model_dump_json())
    else:
        out_console.print(build_parse_tree(root, expression))

    if root.error is not None:
        raise typer.Exit(code=1)


@app.command(name="eval")
def eval_(
    expression: Annotated[str, typer.Argument(help="Variable expression, e.g. 'Hello ${user.name}'")],
    *,
    variables_file: Annotated[
        Path | None,
        typer.Option("-f", "--variables", help="TOML file of variables (overrides the configured file)"),
    ] = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option("--var", help="Variable assignment name=value, may be repeated"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the result to a TOML file"),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Exit non-zero if the expression cannot be evaluated"),
    ] = None,
) -> None:
    """Evaluate a variable expression."""
    try:
        config = get_config()
        variables: dict[str, Any] = {}
        if config.variables is not None:
            logger.debug("Loading configured variables from %s", config.variables)
            variables.update(load_variables_file(config.variables))
        if variables_file is not None:
            variables.update(load_variables_file(variables_file))
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=2) from e

    for assignment in assignments or []:
        name, value = parse_assignment(assignment)
        variables[name] = value

    evaluator: VariableEvaluator[Any] = VariableEvaluator(expression)
    result = evaluator.evaluate(variables)

    if result.success:
        value = result.value
        if isinstance(value, str):
            out_console.print(value, markup=False, highlight=False)
        else:
            out_console.print_json(json.dumps(value, default=str))
    else:
        err_console.print(f"[red]✗ {escape(result.error or '')}[/red]")

    if evaluator.variable_names:
        err_console.print(f"[dim]Variables read: {escape(', '.join(evaluator.variable_names))}[/dim]")

    if output is not None:
        err_console.print(f"[cyan]Exporting result to:[/cyan] {output}")
        export_result_to_toml(expression, result, evaluator.variable_names, output)

    if strict is None:
        strict = config.strict
    if strict and not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
