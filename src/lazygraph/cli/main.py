from __future__ import annotations

import json
from typing import Any, Optional

import typer

from lazygraph.config import load_settings
from lazygraph.engine.registry import create_engine, global_registry
from lazygraph.errors import LazyGraphError
from lazygraph.graph.context import GraphBuildContext
from lazygraph.ops.math import COMBINATORS
from lazygraph.parsers.program import ProgramParser
from lazygraph.utils import configure_logging

app = typer.Typer(help="lazygraph CLI")


def _parse_feed(items: list[str]) -> dict[str, Any]:
    feeds: dict[str, Any] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got '{item}'", param_hint="--feed")
        try:
            feeds[name] = json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(
                f"Value for '{name}' is not valid JSON: {raw}", param_hint="--feed"
            ) from None
    return feeds


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, help="Logging level, e.g. DEBUG"),
) -> None:
    configure_logging(log_level or load_settings().log_level)


@app.command()
def ops(engine: Optional[str] = typer.Option(None, help="Engine to describe")) -> None:
    """List combinators and the operation types the engine accepts."""
    caps = create_engine(engine).capabilities()
    typer.echo("combinators: " + ", ".join(sorted(COMBINATORS)))
    typer.echo(f"engine {caps.name}: " + ", ".join(caps.op_types))
    typer.echo("engines: " + ", ".join(global_registry.names()))


@app.command()
def run(
    program: str = typer.Argument(..., help="Path to a JSON graph program"),
    engine: Optional[str] = typer.Option(None, help="Engine name (default from LAZYGRAPH_ENGINE)"),
    feed: list[str] = typer.Option([], "--feed", help="Feed a placeholder: name=JSON value"),
) -> None:
    """
    Build the program's graph, run it and print the result as JSON.
    """
    try:
        context = GraphBuildContext(engine or load_settings().engine)
        parsed = ProgramParser(context=context).parse(program)
        result = parsed.run(_parse_feed(feed))
    except LazyGraphError as exc:
        typer.echo(f"error [{exc.code}]: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(result))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
