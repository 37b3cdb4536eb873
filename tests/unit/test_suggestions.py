"""Tests for project-name suggestions and their fallbacks."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from onyxflow.suggestions import MAX_SUGGESTIONS, suggest_project_names


class TestSuggestProjectNames:
    @pytest.mark.asyncio
    async def test_fallback_without_collaborator(self):
        names = await suggest_project_names("Nova", "Video Edit")
        assert len(names) == 3
        assert f"Nova Rebranding {date.today().year}" in names

    @pytest.mark.asyncio
    async def test_collaborator_result_capped(self):
        suggester = AsyncMock()
        suggester.suggest.return_value = [f"Name {i}" for i in range(8)]

        names = await suggest_project_names("Nova", "Video Edit", suggester)

        assert len(names) == MAX_SUGGESTIONS
        suggester.suggest.assert_awaited_once_with("Nova", "Video Edit")

    @pytest.mark.asyncio
    async def test_non_string_entries_dropped(self):
        suggester = AsyncMock()
        suggester.suggest.return_value = ["Good", 42, None, "  ", "Also Good"]

        assert await suggest_project_names("Nova", "X", suggester) == ["Good", "Also Good"]

    @pytest.mark.asyncio
    async def test_collaborator_failure(self):
        suggester = AsyncMock()
        suggester.suggest.side_effect = RuntimeError("quota exceeded")

        assert await suggest_project_names("Nova", "Video Edit", suggester) == [
            "Nova - Video Edit"
        ]
