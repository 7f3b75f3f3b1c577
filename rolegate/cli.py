"""CLI entry point for rolegate."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from rolegate.config import RolegateConfig, load_config
from rolegate.config.loader import DEFAULT_CONFIG_TEMPLATE
from rolegate.control import AccessControl
from rolegate.errors import AccessControlError

app = typer.Typer(
    name="rolegate",
    help="Role and attribute based access control over a YAML/JSON policy.",
)

config_app = typer.Typer(help="Manage rolegate configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: RolegateConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

PolicyOption = Annotated[
    str | None, typer.Option("--policy", "-p", help="Policy file (overrides config)")
]


def _configure_logging(cfg: RolegateConfig) -> None:
    root = logging.getLogger()
    root.setLevel(_LOG_LEVELS[cfg.log_level])
    # Leave handlers installed by an embedding application alone.
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def _get_config() -> RolegateConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to rolegate.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    _configure_logging(_config)


def _load_access_control(policy: str | None) -> AccessControl:
    """Build an AccessControl from --policy or the configured policy path.

    Exits with code 2 when no policy is set or it fails to load.
    """
    cfg = _get_config()
    path = policy or cfg.policy.path
    if not path:
        rprint("[red]Error:[/red] No policy file. Pass --policy or set policy.path in config.")
        raise typer.Exit(2)
    fmt = cfg.policy.format if not policy else "auto"
    try:
        return AccessControl.from_file(path, lock=cfg.policy.lock_on_load, fmt=fmt)
    except (ValueError, AccessControlError) as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command()
def check(
    role: str = typer.Argument(..., help="Role name, or several separated by commas"),
    action: str = typer.Argument(..., help="create | read | update | delete (optionally :own/:any)"),
    resource: str = typer.Argument(..., help="Resource name"),
    policy: PolicyOption = None,
    possession: str | None = typer.Option(None, "--possession", help="own | any"),
) -> None:
    """Check whether ROLE may perform ACTION on RESOURCE."""
    ac = _load_access_control(policy)
    try:
        permission = ac.permission(
            {"role": role, "resource": resource, "action": action, "possession": possession}
        )
    except AccessControlError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    subject = f"{role} {permission.action.value}:{permission.possession.value} {resource}"
    if not permission.granted:
        rprint(f"[red]denied[/red] {escape(subject)}")
        raise typer.Exit(1)
    rprint(f"[green]granted[/green] {escape(subject)}")
    rprint(f"[dim]attributes:[/dim] {escape(', '.join(permission.attributes))}")


@app.command()
def roles(policy: PolicyOption = None) -> None:
    """List roles with their inherited roles and resources."""
    ac = _load_access_control(policy)
    grants = ac.get_grants()

    table = Table(title=f"Roles ({len(grants)})")
    table.add_column("Role", style="cyan")
    table.add_column("Inherits", style="yellow")
    table.add_column("Resources", style="green")
    for name, record in grants.items():
        inherited = ac.get_inherited_roles_of(name)
        resources = [r for r in record if r != "$extend"]
        table.add_row(
            escape(name),
            escape(", ".join(inherited)) if inherited else "-",
            escape(", ".join(resources)) if resources else "-",
        )
    rprint(table)


@app.command("filter")
def filter_cmd(
    role: str = typer.Argument(..., help="Role name"),
    action: str = typer.Argument(..., help="Action, optionally with :own/:any"),
    resource: str = typer.Argument(..., help="Resource name"),
    data: str = typer.Argument(..., help="JSON object or array to filter"),
    policy: PolicyOption = None,
) -> None:
    """Print DATA reduced to the attributes ROLE may see."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        rprint(f"[red]Error:[/red] Invalid JSON data: {escape(str(e))}")
        raise typer.Exit(2)

    ac = _load_access_control(policy)
    try:
        permission = ac.permission({"role": role, "resource": resource, "action": action})
    except AccessControlError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    typer.echo(json.dumps(permission.filter(payload)))


@app.command()
def validate(policy: PolicyOption = None) -> None:
    """Load the policy and report what it defines."""
    ac = _load_access_control(policy)
    roles_count = len(ac.get_roles())
    resources_count = len(ac.get_resources())
    rprint(
        Panel(
            f"[bold]Roles:[/bold]     {roles_count}\n[bold]Resources:[/bold] {resources_count}",
            title="Policy OK",
            border_style="green",
        )
    )


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default rolegate.yaml in current directory."""
    target = Path("rolegate.yaml")
    if target.exists() and not force:
        rprint("[yellow]rolegate.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
