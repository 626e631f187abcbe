"""Project tree built from mc_projects_get_user_accessible."""

from __future__ import annotations

from typing import Any

from mantis_client_impl.mantis_issue import as_list, same_id
from mantis_client_interface.models import Project


def build_project(raw_data: dict) -> Project:
    return Project(
        id=int(raw_data["id"]),
        name=raw_data.get("name") or "",
        subprojects=build_projects(raw_data.get("subprojects")),
        raw=raw_data,
    )


def build_projects(raw_projects: Any) -> list[Project]:
    """Build the project forest, subprojects default to an empty list."""
    return [build_project(raw) for raw in as_list(raw_projects) if raw]


def find_project(projects: list[Project], project_id: int) -> Project | None:
    """Depth-first search of the project forest, returns the first node with that id."""
    for project in projects:
        if same_id(project.id, project_id):
            return project

        if project.subprojects:
            found = find_project(project.subprojects, project_id)
            if found is not None:
                return found

    return None
