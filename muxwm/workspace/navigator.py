"""Navigation flows that need both the repository and the window host.

The repository only produces and consumes display names; ``Navigator`` asks
the host which workspace is focused, decodes it, runs the repository
operation and tells the host what to focus next.
"""

from __future__ import annotations

from muxwm.workspace.errors import MalformedDisplayNameError, NotManagedError, ViewNotFoundError
from muxwm.workspace.host.base import WindowHost
from muxwm.workspace.models import Direction, Pin, Project, View
from muxwm.workspace.repository import WorkspaceRepository


class Navigator:
    def __init__(self, repository: WorkspaceRepository, host: WindowHost) -> None:
        self.repository = repository
        self.host = host

    # -- Query -----------------------------------------------------------------

    def current(self) -> tuple[Project, View]:
        """The managed project and view behind the focused workspace.

        Raises ``NotManagedError`` when nothing is focused or the focused
        workspace was not created by muxwm.
        """
        name = self.host.active_workspace_name()
        if name is None:
            raise NotManagedError(None)
        try:
            return self.repository.resolve_display_name(name)
        except (MalformedDisplayNameError, ViewNotFoundError):
            raise NotManagedError(name) from None

    def unmanaged_workspaces(self) -> list[str]:
        """Host workspaces that do not decode to a managed project and view."""
        unmanaged = []
        for name in self.host.all_workspace_names():
            try:
                self.repository.resolve_display_name(name)
            except (MalformedDisplayNameError, ViewNotFoundError):
                unmanaged.append(name)
        return unmanaged

    # -- Focus -----------------------------------------------------------------

    def focus_view(self, view: View) -> str:
        """Make *view* its project's active view and focus it.  Returns the display name."""
        project = self.repository.get_project(view.project_id)
        self.repository.set_active_view_for_project(project, view)
        display_name = self.repository.get_window_manager_display_name(view)
        self.host.focus(display_name)
        return display_name

    def focus_project(self, name: str) -> str:
        """Focus the active view of the project called *name*."""
        project = self.repository.get_project_by_name(name)
        view = self.repository.get_active_view_for_project(project)
        display_name = self.repository.get_window_manager_display_name(view)
        self.host.focus(display_name)
        return display_name

    def cycle(self, direction: Direction) -> View:
        """Step the focused project to its next or previous view."""
        project, _ = self.current()
        view = self.repository.step_view_for_project(project, direction)
        self.focus_view(view)
        return view

    def new_view(self, name: str, project: Project | None = None) -> View:
        """Append a view to *project* (default: the focused one) and focus it."""
        if project is None:
            project, _ = self.current()
        view = self.repository.add_view_to_project(project, name)
        self.host.focus(self.repository.get_window_manager_display_name(view))
        return view

    # -- Pins ------------------------------------------------------------------

    def pin_current(self, key: str) -> Pin:
        _, view = self.current()
        return self.repository.set_pin(key, view)

    def focus_pin(self, key: str) -> View:
        view = self.repository.get_view_for_pin_key(key)
        self.focus_view(view)
        return view
