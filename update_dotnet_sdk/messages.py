"""Commit message, pull request and step summary text."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from .config import UpdateOptions
from .models import SdkVersions
from .versions import update_kind

TITLE_PREFIX = "Update .NET SDK to "
DEPENDENCY_NAME = "Microsoft.NET.Sdk"


def _with_prefix(text: str, prefix: str) -> str:
    return f"{prefix} {text}" if prefix else text


def pull_request_title_prefix(options: UpdateOptions) -> str:
    """The title text shared by every update pull request for these options."""
    return _with_prefix(TITLE_PREFIX, options.commit_message_prefix)


def generate_pull_request_title(version: str, options: UpdateOptions) -> str:
    return f"{pull_request_title_prefix(options)}{version}"


def generate_commit_message(current_sdk_version: str, latest_sdk_version: str) -> str:
    """Build the commit message for an SDK update.

    The body carries the same updated-dependencies metadata Dependabot
    writes, so tooling that acts on Dependabot commits (auto-merge, etc.)
    treats the update the same way.
    """
    kind = update_kind(current_sdk_version, latest_sdk_version)
    lines = [
        "Update .NET SDK",
        "",
        f"Update .NET SDK to version {latest_sdk_version}.",
        "",
        "---",
        "updated-dependencies:",
        f"- dependency-name: {DEPENDENCY_NAME}",
        f"  dependency-version: {latest_sdk_version}",
        "  dependency-type: direct:production",
        f"  update-type: version-update:semver-{kind}",
        "...",
        "",
    ]
    return "\n".join(lines)


def commit_message_for(update: SdkVersions, options: UpdateOptions) -> str:
    """The configured commit message, or a generated one, with any prefix."""
    message = options.commit_message or generate_commit_message(
        update.current.sdk_version, update.latest.sdk_version
    )
    return _with_prefix(message, options.commit_message_prefix)


def generate_pull_request_body(update: SdkVersions, options: UpdateOptions) -> str:
    current, latest = update.current, update.latest

    body = f"Updates the .NET SDK to version `{latest.sdk_version}`, "
    if current.runtime_version == latest.runtime_version:
        body += (
            f"which includes version [`{latest.runtime_version}`]"
            f"({latest.release_notes}) of the .NET runtime."
        )
    else:
        body += (
            f"which also updates the .NET runtime from version "
            f"[`{current.runtime_version}`]({current.release_notes}) to version "
            f"[`{latest.runtime_version}`]({latest.release_notes})."
        )

    if update.security and update.security_issues:
        body += "\n\nThis release includes fixes for the following security issue(s):"
        for issue in update.security_issues:
            # github.com links CVE identifiers itself
            if options.is_github_enterprise:
                body += f"\n  * [{issue.id}]({issue.url})"
            else:
                body += f"\n  * {issue.id}"

    run_url = f"{options.server_url}/{options.repo}/actions/runs/{options.run_id}"
    body += f"\n\nThis pull request was auto-generated by [GitHub Actions]({run_url})."
    return body


def days_since(released: datetime, now: datetime | None = None) -> int:
    """Whole days between a release and now, rounded down."""
    now = now or datetime.now(timezone.utc)
    return (now - released) // timedelta(days=1)


def generate_summary(update: SdkVersions, now: datetime | None = None) -> str:
    """Render the step summary for an available update."""
    current, latest = update.current, update.latest
    days = days_since(latest.release_date, now)
    unit = "day" if days == 1 else "days"
    icon = ":closed_lock_with_key:" if update.security else ":information_source:"

    lines = [
        f"## {icon} .NET SDK {latest.sdk_version} is available",
        "",
        f"The .NET SDK pinned in global.json is `{current.sdk_version}` "
        f"(runtime `{current.runtime_version}`).",
        "",
        f"Version `{latest.sdk_version}` (runtime `{latest.runtime_version}`) "
        f"was released **{days} {unit}** ago. "
        f"See the [release notes]({latest.release_notes}) for details.",
    ]

    if update.security and update.security_issues:
        lines += ["", "### Security issues", ""]
        lines += [f"- [{issue.id}]({issue.url})" for issue in update.security_issues]

    return "\n".join(lines) + "\n"
