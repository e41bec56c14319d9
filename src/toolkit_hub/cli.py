"""
toolkit-hub CLI

Command-line interface for inspecting and exercising the hub.

Commands:
    toolkit-hub status                 — Show package status (human view)
    toolkit-hub health                 — Print the health report as JSON
    toolkit-hub tools                  — List exposed tool names
    toolkit-hub call NAME --args JSON  — Invoke a tool through the guardrails

Usage:
    toolkit-hub --config ~/.config/toolkit-hub/config.yaml status
    toolkit-hub call sheets_list_sheets --args '{"spreadsheet_id": "abc123"}'
"""

from __future__ import annotations

import asyncio
import json
import sys

import click

from toolkit_hub import __version__
from toolkit_hub.hub import ToolkitHub
from toolkit_hub.logging import configure_logging


async def _with_hub(config_path: str | None, action):
    hub = ToolkitHub(config_path=config_path)
    await hub.initialize()
    try:
        return await action(hub)
    finally:
        hub.shutdown()


@click.group()
@click.version_option(version=__version__, prog_name="toolkit-hub")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $TOOLKIT_HUB_CONFIG or ~/.config/toolkit-hub/config.yaml)",
)
@click.option("--log-level", default="WARNING", help="Diagnostic log level")
@click.option("--json-logs", is_flag=True, help="Emit diagnostic logs as JSON")
@click.pass_context
def app(ctx: click.Context, config_path: str | None, log_level: str, json_logs: bool) -> None:
    """toolkit-hub — policy-guarded capability hub"""
    configure_logging(level=log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@app.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show which packages are configured and loaded."""

    async def _status(hub: ToolkitHub) -> str:
        return await hub.status()

    click.echo(asyncio.run(_with_hub(ctx.obj["config_path"], _status)))


@app.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Print the structured health report."""

    async def _health(hub: ToolkitHub) -> dict:
        return await hub.health()

    report = asyncio.run(_with_hub(ctx.obj["config_path"], _health))
    click.echo(json.dumps(report, indent=2, default=str))
    if report["status"] == "unhealthy":
        sys.exit(1)


@app.command()
@click.option("--schemas", is_flag=True, help="Print full tool schemas as JSON")
@click.pass_context
def tools(ctx: click.Context, schemas: bool) -> None:
    """List exposed tools."""

    async def _tools(hub: ToolkitHub) -> list[dict]:
        return hub.list_tools()

    listing = asyncio.run(_with_hub(ctx.obj["config_path"], _tools))
    if schemas:
        click.echo(json.dumps(listing, indent=2))
        return
    for entry in listing:
        click.echo(f"{entry['name']:40s} {entry['description'][:60]}")


@app.command()
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
@click.pass_context
def call(ctx: click.Context, name: str, raw_args: str) -> None:
    """Invoke a tool through the full guardrail pipeline."""
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args") from e
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")

    async def _call(hub: ToolkitHub):
        return await hub.call_tool(name, arguments)

    result = asyncio.run(_with_hub(ctx.obj["config_path"], _call))
    click.echo(result.content)
    if result.is_error:
        sys.exit(1)


def cli() -> None:
    """Main CLI entry point."""
    app(obj={})


if __name__ == "__main__":
    cli()
