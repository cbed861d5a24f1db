"""Update pipeline: read → resolve → patch → publish.

This module orchestrates one update check:
1. Read the SDK version pinned in global.json
2. Resolve the current and latest releases for the channel
3. Decide whether to update (newer version, security-only filter)
4. Rewrite global.json with the new version
5. Commit the change and open a pull request
6. Report the outcome as an UpdateResult

The run is idempotent: the update branch is named after the version, so a
version that has already been proposed is not proposed twice.
"""

from __future__ import annotations

from .config import UpdateOptions, resolve_channel
from .github import GitHubClient
from .manifest import load_global_json, update_global_json
from .messages import generate_summary
from .models import SdkVersions, UpdateResult
from .publisher import publish_update
from .shell import step
from .updates import resolve_update


def report(update: SdkVersions, options: UpdateOptions) -> None:
    """Print the current and latest versions."""
    current, latest = update.current, update.latest
    channel = resolve_channel(options, current.sdk_version)
    print(f"  Current .NET SDK version is {current.sdk_version}")
    print(f"  Current .NET runtime version is {current.runtime_version}")
    print(
        f"  Latest .NET SDK version for channel '{channel}' is "
        f"{latest.sdk_version} (runtime version {latest.runtime_version})"
    )


def _read_global_json(options: UpdateOptions) -> tuple[str, str]:
    step(f"Reading {options.global_json_path}")
    text, sdk_version = load_global_json(options.global_json_path)
    print(f"  sdk.version: {sdk_version}")
    return text, sdk_version


def check_update(options: UpdateOptions) -> SdkVersions:
    """Resolve the update for global.json without changing anything."""
    _, sdk_version = _read_global_json(options)

    update = resolve_update(options, sdk_version)
    report(update, options)
    return update


def _github_client(options: UpdateOptions) -> GitHubClient | None:
    if options.dry_run or not options.repo:
        return None
    return GitHubClient(options.access_token, options.repo, options.api_url)


def run_update(options: UpdateOptions, client: GitHubClient | None = None) -> UpdateResult:
    """Execute the full update pipeline.

    Args:
        options: Run options.
        client: GitHub client to use; created from options if not given.

    Returns:
        The outcome of the run. updated is False if the SDK is up to date,
        the update was filtered out, or it has already been proposed.
    """
    text, sdk_version = _read_global_json(options)
    update = resolve_update(options, sdk_version)
    report(update, options)

    latest = update.latest
    summary = None
    if options.generate_step_summary and update.has_update:
        summary = generate_summary(update)

    result = UpdateResult(
        updated=False,
        version=latest.sdk_version,
        security=update.security,
        runtime_version=latest.runtime_version,
        aspnetcore_version=latest.aspnetcore_version or "",
        windows_desktop_version=latest.windows_desktop_version or "",
        summary=summary,
    )

    if not update.has_update:
        print("\nThe current .NET SDK version is up-to-date.")
        return result

    if options.security_only and not update.security:
        print("\nSkipping update as it does not contain any security fixes.")
        return result

    step(f"Updating .NET SDK version in {options.global_json_path}")
    update_global_json(
        options.global_json_path, text, update.current.sdk_version, latest.sdk_version
    )
    print(f"  {update.current.sdk_version} → {latest.sdk_version}")

    publication = publish_update(update, options, client or _github_client(options))
    if publication is None:
        return result

    pull_request = publication.pull_request
    result = result.model_copy(
        update={
            "updated": True,
            "branch_name": publication.branch,
            "pull_request_number": pull_request.number if pull_request else None,
            "pull_request_url": pull_request.url if pull_request else "",
            "superseded": publication.superseded,
        }
    )

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return result
