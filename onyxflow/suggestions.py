"""Caller side of the project-name suggestion collaborator.

The collaborator itself (a generative text service) is pluggable: set
``Dashboard.suggester`` to anything with an async ``suggest``. This module
only guarantees callers always get something usable back.
"""

import logging
from datetime import date
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


@runtime_checkable
class NameSuggester(Protocol):
    async def suggest(self, client_name: str, project_type: str) -> list[str]:
        ...


def fallback_project_names(client_name: str, project_type: str) -> list[str]:
    """Canned names used when no collaborator is configured."""
    return [
        f"{client_name} {project_type} Campaign",
        f"{client_name} Rebranding {date.today().year}",
        f"{project_type} - {client_name} v1",
    ]


async def suggest_project_names(
    client_name: str,
    project_type: str,
    suggester: Optional[NameSuggester] = None,
) -> list[str]:
    """Up to five suggested names; an empty list from the collaborator is kept."""
    if suggester is None:
        logger.warning("No name suggester configured, using fallback names")
        return fallback_project_names(client_name, project_type)

    try:
        names = await suggester.suggest(client_name, project_type)
    except Exception as e:
        logger.error(f"Name suggestion failed: {e}")
        return [f"{client_name} - {project_type}"]

    return [n for n in names if isinstance(n, str) and n.strip()][:MAX_SUGGESTIONS]
