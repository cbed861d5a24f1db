"""Tests for update_dotnet_sdk.messages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from update_dotnet_sdk.config import UpdateOptions
from update_dotnet_sdk.models import ReleaseInfo, SdkVersions, SecurityIssue
from update_dotnet_sdk.messages import (
    commit_message_for,
    days_since,
    generate_commit_message,
    generate_pull_request_body,
    generate_pull_request_title,
    generate_summary,
    pull_request_title_prefix,
)

MakeRelease = Callable[..., ReleaseInfo]

ISSUES = [
    SecurityIssue(id="CVE-2022-41089", url="https://example.com/CVE-2022-41089"),
    SecurityIssue(id="CVE-2023-21808", url="https://example.com/CVE-2023-21808"),
]


@pytest.fixture
def security_update(make_release: MakeRelease) -> SdkVersions:
    """7.0.100 → 7.0.202 with two advisories."""
    return SdkVersions(
        current=make_release("7.0.100", "7.0.0"),
        latest=make_release(
            "7.0.202",
            "7.0.4",
            release_date=datetime(2023, 3, 14, tzinfo=timezone.utc),
        ),
        security=True,
        security_issues=ISSUES,
    )


class TestGenerateCommitMessage:
    """Tests for generate_commit_message() and commit_message_for()."""

    def test_includes_dependency_metadata(self) -> None:
        """The body carries Dependabot-style updated-dependencies metadata."""
        message = generate_commit_message("3.1.100", "3.1.200")

        assert message == (
            "Update .NET SDK\n"
            "\n"
            "Update .NET SDK to version 3.1.200.\n"
            "\n"
            "---\n"
            "updated-dependencies:\n"
            "- dependency-name: Microsoft.NET.Sdk\n"
            "  dependency-version: 3.1.200\n"
            "  dependency-type: direct:production\n"
            "  update-type: version-update:semver-patch\n"
            "...\n"
        )

    @pytest.mark.parametrize(
        ("current", "latest", "kind"),
        [
            ("2.1.100", "3.0.101", "major"),
            ("3.0.100", "3.1.100", "minor"),
            ("3.1.100", "3.1.200", "patch"),
        ],
    )
    def test_classifies_update(self, current: str, latest: str, kind: str) -> None:
        """The update type follows the changed version component."""
        message = generate_commit_message(current, latest)

        assert f"update-type: version-update:semver-{kind}\n" in message

    def test_uses_configured_message_and_prefix(
        self, options: UpdateOptions, security_update: SdkVersions
    ) -> None:
        """A configured message replaces the generated one; the prefix applies to both."""
        configured = options.model_copy(
            update={"commit_message": "Bump SDK", "commit_message_prefix": "chore:"}
        )

        assert commit_message_for(security_update, configured) == "chore: Bump SDK"

    def test_prefixes_generated_message(
        self, options: UpdateOptions, security_update: SdkVersions
    ) -> None:
        """The prefix is prepended to the generated message."""
        prefixed = options.model_copy(update={"commit_message_prefix": "chore:"})

        assert commit_message_for(security_update, prefixed).startswith(
            "chore: Update .NET SDK\n"
        )


class TestPullRequestTitle:
    """Tests for generate_pull_request_title()."""

    def test_title(self, options: UpdateOptions) -> None:
        """The title names the new version."""
        assert generate_pull_request_title("7.0.202", options) == "Update .NET SDK to 7.0.202"

    def test_title_with_prefix(self, options: UpdateOptions) -> None:
        """The commit message prefix also prefixes the title."""
        prefixed = options.model_copy(update={"commit_message_prefix": "chore:"})

        assert pull_request_title_prefix(prefixed) == "chore: Update .NET SDK to "
        assert generate_pull_request_title("7.0.202", prefixed) == (
            "chore: Update .NET SDK to 7.0.202"
        )


class TestGeneratePullRequestBody:
    """Tests for generate_pull_request_body()."""

    def test_same_runtime(self, options: UpdateOptions, make_release: MakeRelease) -> None:
        """A feature band update links the unchanged runtime."""
        update = SdkVersions(
            current=make_release("5.0.103", "5.0.3"),
            latest=make_release("5.0.200", "5.0.3", release_notes="https://notes/5.0.3"),
        )

        body = generate_pull_request_body(update, options)

        assert body == (
            "Updates the .NET SDK to version `5.0.200`, which includes version "
            "[`5.0.3`](https://notes/5.0.3) of the .NET runtime.\n\n"
            "This pull request was auto-generated by "
            "[GitHub Actions](https://github.com/octo/repo/actions/runs/42)."
        )

    def test_runtime_update_with_security_fixes(
        self, options: UpdateOptions, security_update: SdkVersions
    ) -> None:
        """A runtime update links both runtimes and lists the advisories."""
        body = generate_pull_request_body(security_update, options)

        assert "which also updates the .NET runtime from version [`7.0.0`](" in body
        assert "to version [`7.0.4`](" in body
        assert (
            "This release includes fixes for the following security issue(s):\n"
            "  * CVE-2022-41089\n"
            "  * CVE-2023-21808\n\n"
        ) in body

    def test_enterprise_links_advisories(
        self, options: UpdateOptions, security_update: SdkVersions
    ) -> None:
        """On GitHub Enterprise advisories are linked explicitly."""
        enterprise = options.model_copy(update={"server_url": "https://ghes.example.com"})

        body = generate_pull_request_body(security_update, enterprise)

        assert "  * [CVE-2022-41089](https://example.com/CVE-2022-41089)" in body
        assert body.endswith(
            "[GitHub Actions](https://ghes.example.com/octo/repo/actions/runs/42)."
        )


class TestSummary:
    """Tests for days_since() and generate_summary()."""

    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (datetime(2023, 3, 14, 23, 59, tzinfo=timezone.utc), 0),
            (datetime(2023, 3, 15, tzinfo=timezone.utc), 1),
            (datetime(2023, 3, 24, 12, tzinfo=timezone.utc), 10),
        ],
    )
    def test_days_since(self, now: datetime, expected: int) -> None:
        """Partial days are rounded down."""
        assert days_since(datetime(2023, 3, 14, tzinfo=timezone.utc), now) == expected

    def test_security_summary(self, security_update: SdkVersions) -> None:
        """A security update lists its advisories."""
        summary = generate_summary(
            security_update, now=datetime(2023, 3, 24, tzinfo=timezone.utc)
        )

        assert summary.startswith(
            "## :closed_lock_with_key: .NET SDK 7.0.202 is available\n"
        )
        assert "was released **10 days** ago" in summary
        assert "### Security issues" in summary
        assert "- [CVE-2023-21808](https://example.com/CVE-2023-21808)\n" in summary

    def test_single_day(self, make_release: MakeRelease) -> None:
        """One day is singular and non-security updates have no advisory list."""
        update = SdkVersions(
            current=make_release("7.0.100", "7.0.0"),
            latest=make_release(
                "7.0.202", "7.0.4", release_date=datetime(2023, 3, 14, tzinfo=timezone.utc)
            ),
        )

        summary = generate_summary(update, now=datetime(2023, 3, 15, 6, tzinfo=timezone.utc))

        assert summary.startswith("## :information_source: .NET SDK 7.0.202 is available")
        assert "**1 day**" in summary
        assert "Security issues" not in summary
