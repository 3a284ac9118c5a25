from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
from loguru import logger

from muxwm.workspace.errors import WorkspaceError
from muxwm.workspace.host.base import WindowHost, WindowHostError
from muxwm.workspace.log import level_for_verbosity, setup_logging
from muxwm.workspace.models import Direction, Project
from muxwm.workspace.navigator import Navigator
from muxwm.workspace.repository import WorkspaceRepository
from muxwm.workspace.settings import MuxSettings, get_settings


@dataclass
class CliContext:
    """Per-invocation state shared by all commands.

    The repository and window host are opened lazily so commands that need
    only one of them never touch the other.  Tests inject both.
    """

    settings: MuxSettings | None = None
    host: WindowHost | None = None
    repository: WorkspaceRepository | None = None

    def repo(self) -> WorkspaceRepository:
        if self.repository is None:
            if self.settings is None:
                msg = "CliContext has no settings; the root command loads them before any subcommand runs"
                raise RuntimeError(msg)
            self.repository = WorkspaceRepository.from_settings(self.settings)
        return self.repository

    def window_host(self) -> WindowHost:
        if self.host is None:
            from muxwm.workspace.host.i3 import I3WindowHost

            self.host = I3WindowHost()
        return self.host

    def navigator(self) -> Navigator:
        return Navigator(self.repo(), self.window_host())

    def close(self) -> None:
        if self.repository is not None:
            self.repository.close()
            self.repository = None


class _MuxGroup(click.Group):
    """Root group: turns domain errors into a one-line message and exit code 1."""

    def invoke(self, ctx: click.Context) -> object:
        try:
            return super().invoke(ctx)
        except (WorkspaceError, WindowHostError) as exc:
            logger.debug("Command failed: {!r}", exc)
            raise click.ClickException(str(exc)) from exc


@click.group(cls=_MuxGroup)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Env file with MUXWM_* settings (default: .env).",
)
@click.option("-d", "--debug", count=True, help="Increase log verbosity (-d info, -dd debug).")
@click.pass_context
def main(ctx: click.Context, config: Path | None, debug: int) -> None:
    """muxwm - tmux-like projects, views and pins on top of i3/sway workspaces."""
    app = ctx.ensure_object(CliContext)
    if app.settings is None:
        app.settings = MuxSettings(_env_file=config) if config is not None else get_settings()
    setup_logging(level_for_verbosity(app.settings.log_level, debug))
    ctx.call_on_close(app.close)


pass_app = click.make_pass_decorator(CliContext)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@main.group()
def project() -> None:
    """Create, list and focus projects."""


@project.command("add")
@click.argument("name")
@click.option("--focus", is_flag=True, default=False, help="Switch to the new project's view.")
@pass_app
def project_add(app: CliContext, name: str, focus: bool) -> None:
    """Create a project with its default view."""
    repo = app.repo()
    project_id = repo.add_project(name)
    created = repo.get_project(project_id)
    view = repo.get_active_view_for_project(created)
    display_name = repo.get_window_manager_display_name(view)
    if focus:
        app.window_host().focus(display_name)
    click.echo(f"Created project '{created.name}' ({display_name})")


@project.command("list")
@pass_app
def project_list(app: CliContext) -> None:
    """List projects with their active view."""
    repo = app.repo()
    for item in repo.list_projects():
        view = repo.get_active_view_for_project(item)
        click.echo(f"{item.name}\t{view.name}")


@project.command("focus")
@click.argument("name")
@pass_app
def project_focus(app: CliContext, name: str) -> None:
    """Switch to the active view of a project."""
    click.echo(app.navigator().focus_project(name))


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@main.group()
def view() -> None:
    """Add, list and cycle through the views of a project."""


@view.command("add")
@click.argument("name")
@click.option("--project", "project_name", default=None, help="Target project (default: the focused one).")
@pass_app
def view_add(app: CliContext, name: str, project_name: str | None) -> None:
    """Append a view to a project and switch to it."""
    navigator = app.navigator()
    target = app.repo().get_project_by_name(project_name) if project_name else None
    created = navigator.new_view(name, target)
    click.echo(app.repo().get_window_manager_display_name(created))


@view.command("list")
@click.argument("project_name", required=False)
@pass_app
def view_list(app: CliContext, project_name: str | None) -> None:
    """List a project's views in cycle order (default: the focused project)."""
    repo = app.repo()
    target: Project = repo.get_project_by_name(project_name) if project_name else app.navigator().current()[0]
    active = repo.get_active_view_for_project(target)
    for item in repo.list_views(target):
        marker = "*" if item.id == active.id else " "
        key = repo.get_pin_key_for_view(item) or ""
        click.echo(f"{marker} {item.position}\t{item.name}\t{key}".rstrip())


@view.command("next")
@pass_app
def view_next(app: CliContext) -> None:
    """Switch to the next view of the focused project (wraps around)."""
    navigator = app.navigator()
    moved = navigator.cycle(Direction.NEXT)
    click.echo(app.repo().get_window_manager_display_name(moved))


@view.command("prev")
@pass_app
def view_prev(app: CliContext) -> None:
    """Switch to the previous view of the focused project (wraps around)."""
    navigator = app.navigator()
    moved = navigator.cycle(Direction.PREV)
    click.echo(app.repo().get_window_manager_display_name(moved))


# ---------------------------------------------------------------------------
# Pins
# ---------------------------------------------------------------------------


@main.group()
def pin() -> None:
    """Bind single keys to views for instant recall."""


@pin.command("set")
@click.argument("key")
@pass_app
def pin_set(app: CliContext, key: str) -> None:
    """Pin the focused view to KEY (replacing any previous binding)."""
    navigator = app.navigator()
    created = navigator.pin_current(key)
    target = app.repo().get_view_for_pin_key(created.key)
    click.echo(f"{created.key} -> {app.repo().get_window_manager_display_name(target)}")


@pin.command("clear")
@click.argument("key")
@pass_app
def pin_clear(app: CliContext, key: str) -> None:
    """Remove the pin for KEY (no-op if unset)."""
    app.repo().clear_pin(key)


@pin.command("focus")
@click.argument("key")
@pass_app
def pin_focus(app: CliContext, key: str) -> None:
    """Switch to the view pinned to KEY."""
    navigator = app.navigator()
    target = navigator.focus_pin(key)
    click.echo(app.repo().get_window_manager_display_name(target))


@pin.command("list")
@pass_app
def pin_list(app: CliContext) -> None:
    """List pins and the workspace each one targets."""
    repo = app.repo()
    for item in repo.list_pins():
        target = repo.get_view_for_pin_key(item.key)
        click.echo(f"{item.key}\t{repo.get_window_manager_display_name(target)}")


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


@main.command()
@click.option("--no-host", is_flag=True, default=False, help="Do not query the window manager.")
@pass_app
def status(app: CliContext, no_host: bool) -> None:
    """Show every project, its views, the active view and pins."""
    repo = app.repo()
    for item in repo.list_projects():
        click.echo(item.name)
        active = repo.get_active_view_for_project(item)
        for entry in repo.list_views(item):
            marker = "*" if entry.id == active.id else " "
            key = repo.get_pin_key_for_view(entry)
            suffix = f" [{key}]" if key else ""
            click.echo(f"  {marker} {entry.name}{suffix}")

    if no_host:
        return
    try:
        unmanaged = app.navigator().unmanaged_workspaces()
    except WindowHostError as exc:
        logger.info("Window host not reachable, skipping unmanaged workspaces: {}", exc)
        return
    if unmanaged:
        click.echo("unmanaged")
        for name in unmanaged:
            click.echo(f"  {name}")
