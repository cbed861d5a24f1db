"""Tests for update_dotnet_sdk.pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from unittest.mock import MagicMock, patch

import pytest

from update_dotnet_sdk.config import UpdateOptions
from update_dotnet_sdk.models import (
    PullRequest,
    ReleaseInfo,
    SdkVersions,
    SecurityIssue,
)
from update_dotnet_sdk.pipeline import check_update, run_update
from update_dotnet_sdk.publisher import Publication

MakeRelease = Callable[..., ReleaseInfo]


@pytest.fixture
def update(make_release: MakeRelease) -> SdkVersions:
    """7.0.100 → 7.0.202 with a skipped security fix."""
    return SdkVersions(
        current=make_release("7.0.100", "7.0.0"),
        latest=make_release(
            "7.0.202",
            "7.0.4",
            aspnetcore_version="7.0.4",
            windows_desktop_version="7.0.4",
            release_date=datetime(2023, 3, 14, tzinfo=timezone.utc),
        ),
        security=True,
        security_issues=[
            SecurityIssue(id="CVE-2023-21808", url="https://example.com/CVE-2023-21808")
        ],
    )


@pytest.fixture
def up_to_date(make_release: MakeRelease) -> SdkVersions:
    """7.0.100 is already the latest SDK."""
    current = make_release("7.0.100", "7.0.0")
    return SdkVersions(current=current, latest=current)


class TestCheckUpdate:
    """Tests for check_update()."""

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_reads_global_json(
        self,
        mock_resolve: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """The pinned version is resolved without changing anything."""
        mock_resolve.return_value = update
        before = options.global_json_path.read_text()

        assert check_update(options) == update

        mock_resolve.assert_called_once_with(options, "7.0.100")
        assert options.global_json_path.read_text() == before


class TestRunUpdate:
    """Tests for run_update()."""

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_up_to_date(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        up_to_date: SdkVersions,
    ) -> None:
        """Nothing is written or published when the SDK is current."""
        mock_resolve.return_value = up_to_date
        before = options.global_json_path.read_text()

        result = run_update(options, client=MagicMock())

        assert not result.updated
        assert result.version == "7.0.100"
        assert result.summary is None
        assert options.global_json_path.read_text() == before
        mock_publish.assert_not_called()

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_security_only_skips_non_security_update(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """Updates without security fixes are skipped in security-only mode."""
        mock_resolve.return_value = update.model_copy(
            update={"security": False, "security_issues": []}
        )
        security_only = options.model_copy(update={"security_only": True})
        before = options.global_json_path.read_text()

        result = run_update(security_only, client=MagicMock())

        assert not result.updated
        assert result.version == "7.0.202"
        assert options.global_json_path.read_text() == before
        mock_publish.assert_not_called()

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_publishes_update(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """global.json is rewritten and the update is proposed."""
        mock_resolve.return_value = update
        mock_publish.return_value = Publication(
            branch="update-dotnet-sdk-7.0.202",
            pull_request=PullRequest(number=8, url="https://github.com/octo/repo/pull/8"),
            superseded=[5],
        )
        security_only = options.model_copy(update={"security_only": True})
        client = MagicMock()

        result = run_update(security_only, client=client)

        assert '"version": "7.0.202"' in options.global_json_path.read_text()
        mock_publish.assert_called_once_with(update, security_only, client)
        assert result.updated
        assert result.version == "7.0.202"
        assert result.branch_name == "update-dotnet-sdk-7.0.202"
        assert result.pull_request_number == 8
        assert result.pull_request_url == "https://github.com/octo/repo/pull/8"
        assert result.superseded == [5]
        assert result.security
        assert result.runtime_version == "7.0.4"
        assert result.aspnetcore_version == "7.0.4"
        assert result.windows_desktop_version == "7.0.4"

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_already_proposed(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """An update whose branch already exists is not reported as updated."""
        mock_resolve.return_value = update
        mock_publish.return_value = None

        result = run_update(options, client=MagicMock())

        assert not result.updated
        assert result.branch_name == ""
        assert result.pull_request_number is None

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_dry_run_without_client(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """No GitHub client is created in dry-run mode."""
        mock_resolve.return_value = update
        mock_publish.return_value = Publication(branch="update-dotnet-sdk-7.0.202")
        dry_run = options.model_copy(update={"dry_run": True})

        result = run_update(dry_run)

        mock_publish.assert_called_once_with(update, dry_run, None)
        assert result.updated
        assert result.pull_request_number is None
        assert result.pull_request_url == ""

    @patch("update_dotnet_sdk.pipeline.step")
    @patch("update_dotnet_sdk.pipeline.publish_update")
    @patch("update_dotnet_sdk.pipeline.resolve_update")
    def test_generates_summary(
        self,
        mock_resolve: MagicMock,
        mock_publish: MagicMock,
        mock_step: MagicMock,
        options: UpdateOptions,
        update: SdkVersions,
    ) -> None:
        """A summary is rendered for an available update when requested."""
        mock_resolve.return_value = update
        mock_publish.return_value = None
        with_summary = options.model_copy(update={"generate_step_summary": True})

        result = run_update(with_summary, client=MagicMock())

        assert result.summary is not None
        assert ".NET SDK 7.0.202 is available" in result.summary
