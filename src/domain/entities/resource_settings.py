"""Versioned, typed settings attached to projects and dashboards.

Settings are persisted as a JSON blob. Parsing is lenient: unrecognised keys
are dropped and values of the wrong shape fall back to their defaults, so a
blob written by an older or newer client never breaks a read.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any

from domain.entities.resource import ResourceType

SETTINGS_VERSION = 1

PROJECT_VIEWS = ("overview", "board", "list", "calendar", "gantt", "table", "doc")
DASHBOARD_LAYOUTS = ("grid", "list")


@dataclass(frozen=True)
class ProjectSettings:
    """Recognised per-project settings."""

    version: int = SETTINGS_VERSION
    default_view: str = "board"
    show_completed_tasks: bool = True
    color: str | None = None


@dataclass(frozen=True)
class DashboardSettings:
    """Recognised per-dashboard settings."""

    version: int = SETTINGS_VERSION
    layout: str = "grid"
    refresh_interval_seconds: int | None = None
    widgets: tuple[str, ...] = field(default_factory=tuple)


ResourceSettings = ProjectSettings | DashboardSettings

# Older clients wrote camelCase keys.
_KEY_ALIASES = {
    "defaultView": "default_view",
    "showCompletedTasks": "show_completed_tasks",
    "refreshIntervalSeconds": "refresh_interval_seconds",
}


def _load(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    if not isinstance(raw, dict):
        return {}
    return {_KEY_ALIASES.get(key, key): value for key, value in raw.items()}


def _parse_project(data: dict[str, Any]) -> ProjectSettings:
    defaults = ProjectSettings()
    view = data.get("default_view")
    show_completed = data.get("show_completed_tasks")
    color = data.get("color")
    return ProjectSettings(
        default_view=view if view in PROJECT_VIEWS else defaults.default_view,
        show_completed_tasks=(
            show_completed if isinstance(show_completed, bool) else defaults.show_completed_tasks
        ),
        color=color if isinstance(color, str) else None,
    )


def _parse_dashboard(data: dict[str, Any]) -> DashboardSettings:
    defaults = DashboardSettings()
    layout = data.get("layout")
    interval = data.get("refresh_interval_seconds")
    widgets = data.get("widgets")
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        interval = None
    if isinstance(widgets, list):
        widgets = tuple(str(widget) for widget in widgets if isinstance(widget, str))
    else:
        widgets = defaults.widgets
    return DashboardSettings(
        layout=layout if layout in DASHBOARD_LAYOUTS else defaults.layout,
        refresh_interval_seconds=interval,
        widgets=widgets,
    )


def parse_settings(resource_type: ResourceType, raw: Any) -> ResourceSettings:
    """Parse a stored settings blob (dict or JSON text) for a resource type."""
    data = _load(raw)
    if resource_type == ResourceType.DASHBOARD:
        return _parse_dashboard(data)
    if resource_type == ResourceType.PROJECT:
        return _parse_project(data)
    raise ValueError(f"Resource type {resource_type} has no settings")


def dump_settings(settings: ResourceSettings) -> dict[str, Any]:
    """Serialise settings for storage in a JSON column."""
    data = asdict(settings)
    if isinstance(settings, DashboardSettings):
        data["widgets"] = list(settings.widgets)
    return data
