"""Mapping between script production parameters and project columns."""

from __future__ import annotations

import re
from typing import Any

from reelscript.database.project_ops import Project

# Parameter table label -> projects column, in table order
PARAMETER_FIELDS: tuple[tuple[str, str], ...] = (
    ("视觉风格", "style"),
    ("画幅比例", "aspect_ratio"),
    ("情感基调", "emotional_tone"),
    ("每集时长", "episode_duration"),
)
EPISODE_COUNT_LABEL = "总集数"

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_episode_count(value: str | None) -> int | None:
    """Read the leading integer of a value such as ``"12集"``."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def project_fields_from_parameters(parameters: dict[str, str]) -> dict[str, Any]:
    """Return the project columns set by a parameter table.

    Empty values are ignored so a sparse table never blanks a project.
    """
    fields: dict[str, Any] = {}
    for label, column in PARAMETER_FIELDS:
        if parameters.get(label):
            fields[column] = parameters[label]
    count = parse_episode_count(parameters.get(EPISODE_COUNT_LABEL))
    if count is not None:
        fields["total_episodes"] = count
    return fields


def parameters_from_project(project: Project) -> dict[str, str]:
    """Rebuild the parameter table from project columns."""
    parameters: dict[str, str] = {}
    for label, column in PARAMETER_FIELDS:
        value = getattr(project, column)
        if value:
            parameters[label] = value
    if project.total_episodes:
        parameters[EPISODE_COUNT_LABEL] = f"{project.total_episodes}集"
    return parameters
