"""
Tool commands.
"""

import json
from typing import Any, Dict, List, Optional

import typer

from lvm_toolkit.cli.lib.config import load_config
from lvm_toolkit.cli.lib.exceptions import ArgumentValidationError, UnknownToolError
from lvm_toolkit.cli.lib.executor import SubprocessExecutor
from lvm_toolkit.cli.lib.registry import STATUS_CONFIRM, STATUS_OK, Dispatcher

app = typer.Typer(help="Tool commands")


def get_dispatcher() -> Dispatcher:
    cfg = load_config()
    return Dispatcher(SubprocessExecutor(timeout=cfg.command_timeout))


def _parse_value(raw: str) -> Any:
    """Interpret a --arg value as JSON when possible, else as a plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def build_arguments(args_json: Optional[str], pairs: List[str], confirm: bool) -> Dict[str, Any]:
    """
    Merge --args, --arg and --confirm into one argument object.

    Raises:
        typer.BadParameter: If --args is not a JSON object or a pair has no '='
    """
    arguments: Dict[str, Any] = {}
    if args_json:
        try:
            parsed = json.loads(args_json)
        except ValueError as e:
            raise typer.BadParameter(f"--args is not valid JSON: {e}")
        if not isinstance(parsed, dict):
            raise typer.BadParameter("--args must be a JSON object")
        arguments.update(parsed)

    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'")
        arguments[key] = _parse_value(raw)

    if confirm:
        arguments["confirm"] = True
    return arguments


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


@app.command("list")
def list_tools():
    """
    List all tools.
    """
    for spec in get_dispatcher().list_tools():
        marker = " [destructive]" if spec["destructive"] else ""
        typer.echo(f"{spec['name']:<26} {spec['description']}{marker}")


@app.command()
def show(name: str = typer.Argument(..., help="Tool name")):
    """
    Show a tool's description and argument schema.
    """
    try:
        spec = get_dispatcher().get(name)
    except UnknownToolError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1)
    _echo_json(spec.describe())


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name"),
    args_json: Optional[str] = typer.Option(None, "--args", help="Arguments as a JSON object"),
    pairs: Optional[List[str]] = typer.Option(None, "--arg", help="Single argument as key=value (repeatable)"),
    confirm: bool = typer.Option(False, "--confirm", help="Confirm a destructive operation"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the commands without running them"),
):
    """
    Call a tool.

    Prints the response envelope. Exits non-zero unless the status is
    "ok" or "confirm".
    """
    arguments = build_arguments(args_json, pairs or [], confirm)
    dispatcher = get_dispatcher()

    if dry_run:
        try:
            commands = dispatcher.preview(name, arguments)
        except (ArgumentValidationError, UnknownToolError) as e:
            typer.echo(f"Error: {e.message}", err=True)
            raise typer.Exit(1)
        for cmd in commands:
            typer.echo(str(cmd))
        return

    envelope = dispatcher.call(name, arguments)
    _echo_json(envelope)
    if envelope["status"] not in (STATUS_OK, STATUS_CONFIRM):
        raise typer.Exit(1)
