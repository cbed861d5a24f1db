"""Shared fixtures for update_dotnet_sdk tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from update_dotnet_sdk.config import UpdateOptions
from update_dotnet_sdk.models import ReleaseInfo
from update_dotnet_sdk.releases import ReleaseChannel, parse_release_channel

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def load_channel() -> Callable[[str], ReleaseChannel]:
    """Load one of the releases-<channel>.json feeds in tests/fixtures."""

    def _load(channel: str) -> ReleaseChannel:
        data = json.loads((FIXTURES / f"releases-{channel}.json").read_text())
        return parse_release_channel(data, channel)

    return _load


@pytest.fixture
def make_release() -> Callable[..., ReleaseInfo]:
    """Build a ReleaseInfo with sensible defaults."""

    def _make(sdk_version: str, runtime_version: str, **kwargs: Any) -> ReleaseInfo:
        kwargs.setdefault("release_date", datetime(2023, 7, 26, tzinfo=timezone.utc))
        kwargs.setdefault(
            "release_notes", f"https://example.com/release-notes/{runtime_version}.md"
        )
        return ReleaseInfo(
            sdk_version=sdk_version, runtime_version=runtime_version, **kwargs
        )

    return _make


@pytest.fixture
def global_json(tmp_path: Path) -> Path:
    """A global.json pinning SDK 7.0.100."""
    path = tmp_path / "global.json"
    path.write_text('{\n  "sdk": {\n    "version": "7.0.100"\n  }\n}\n')
    return path


@pytest.fixture
def options(global_json: Path) -> UpdateOptions:
    """Options for a run against octo/repo."""
    return UpdateOptions(
        access_token="token",
        global_json_path=global_json,
        repo="octo/repo",
        run_id="42",
    )
