"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer

from uadevice.core.errors import UADeviceError
from uadevice.core.model import Device
from uadevice.core.rule_loader import load_rules_file
from uadevice.core.service import DeviceService

app = typer.Typer(help="Classify user-agent strings into device, brand, and model")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _build_service(rules: Path | None) -> DeviceService:
    service = DeviceService(rules_path=rules)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _format_device(device: Device) -> str:
    return f"device={device.device} brand={device.brand or '-'} model={device.model or '-'}"


@app.command("parse")
def parse_agents(
    agents: list[str] | None = typer.Argument(None, help="User-agent strings; read from stdin when omitted"),
    rules: Path | None = typer.Option(None, "--rules", help="Rules YAML file to use instead of the defaults"),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON object per agent"),
) -> None:
    """Parse user-agent strings and print the matched device."""
    try:
        service = _build_service(rules)
        if not agents:
            agents = [line.rstrip("\r\n") for line in sys.stdin if line.strip()]

        for agent, device in zip(agents, service.parse_many(agents)):
            if as_json:
                typer.echo(json.dumps({"user_agent": agent, **device.to_dict()}))
            else:
                typer.echo(_format_device(device))
    except UADeviceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("rules")
def list_rules(
    rules: Path | None = typer.Option(None, "--rules", help="Rules YAML file to use instead of the defaults"),
) -> None:
    """List compiled device rules in evaluation order."""
    try:
        service = _build_service(rules)
        summaries = service.describe_rules()
        if not summaries:
            typer.echo("No device rules loaded")
            raise typer.Exit(code=1)

        for summary in summaries:
            flag = " [i]" if summary.case_insensitive else ""
            typer.echo(f"{summary.index}: {summary.regex}{flag}")
    except UADeviceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("check")
def check_rules(path: Path) -> None:
    """Validate a rules file without parsing anything."""
    try:
        compiled = load_rules_file(path)
    except UADeviceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"OK: {len(compiled)} device rules in {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
