"""Update decisions: what is the latest SDK, and is it worth updating to?

For official releases the latest SDK is the channel's "latest-sdk", never
older than the current SDK. When the runtime jumps more than one patch
release, the security advisories of the skipped releases are folded into
the update so the pull request reports everything it fixes.

For daily builds the latest SDK is the newest build of the channel at the
requested quality, optionally restricted to a prerelease label.
"""

from __future__ import annotations

from .config import UpdateOptions, infer_channel, resolve_channel
from .errors import ConfigurationError, ReleaseNotFoundError
from .models import ReleaseInfo, SdkVersions, SecurityIssue
from .releases import (
    ReleaseChannel,
    fetch_release_channel,
    find_release_for_runtime,
    get_daily_release,
    get_daily_release_for_sdk,
    get_release_for_sdk,
    map_cves,
    try_fetch_release_channel,
)
from .shell import step
from .versions import SdkVersion, compare_builds


def _parse(version: str) -> SdkVersion:
    parsed = SdkVersion.try_parse(version)
    if parsed is None:
        raise ConfigurationError(f"'{version}' is not a valid .NET SDK version.")
    return parsed


def _no_downgrade(
    current: ReleaseInfo, latest: ReleaseInfo, builds: bool = False
) -> ReleaseInfo:
    """Return latest, or current if current is newer.

    With builds set, prerelease labels are ordered as daily build numbers
    (see compare_builds) rather than compared as plain strings.
    """
    current_version, latest_version = _parse(current.sdk_version), _parse(latest.sdk_version)
    if builds:
        newer = compare_builds(current.sdk_version, latest.sdk_version) > 0
    else:
        newer = current_version > latest_version
    if newer:
        print(
            f"  The current .NET SDK version {current.sdk_version} is newer than "
            f"the latest version {latest.sdk_version}; it will not be downgraded"
        )
        return current
    return latest


def _skipped_releases_security(
    current: ReleaseInfo, latest: ReleaseInfo, channel: ReleaseChannel
) -> tuple[bool, list[SecurityIssue]]:
    """Collect security fixes from patch releases between current and latest.

    Only applies within one major.minor train where both runtimes are
    stable releases: 7.0.0 → 7.0.4 scans 7.0.1, 7.0.2 and 7.0.3.
    """
    current_runtime = SdkVersion.try_parse(current.runtime_version)
    latest_runtime = SdkVersion.try_parse(latest.runtime_version)

    if current_runtime is None or latest_runtime is None:
        return False, []
    if current_runtime.is_prerelease or latest_runtime.is_prerelease:
        return False, []
    if current_runtime.patch < 0 or latest_runtime.patch < 0:
        return False, []
    if (current_runtime.major, current_runtime.minor) != (
        latest_runtime.major,
        latest_runtime.minor,
    ):
        return False, []
    if latest_runtime.patch - current_runtime.patch <= 1:
        return False, []

    security = False
    issues: list[SecurityIssue] = []
    for patch in range(current_runtime.patch + 1, latest_runtime.patch):
        version = f"{current_runtime.major}.{current_runtime.minor}.{patch}"
        release = find_release_for_runtime(version, channel)
        if release is None:
            continue
        security = security or release.security
        issues.extend(map_cves(release.cve_list))

    return security, issues


def _merge_issues(
    own: list[SecurityIssue], skipped: list[SecurityIssue], already_fixed: list[SecurityIssue]
) -> list[SecurityIssue]:
    """Combine advisories, dropping duplicates and ones current already has."""
    fixed_ids = {issue.id for issue in already_fixed}
    merged: dict[str, SecurityIssue] = {}
    for issue in own:
        merged.setdefault(issue.id, issue)
    for issue in skipped:
        if issue.id not in fixed_ids:
            merged.setdefault(issue.id, issue)
    return sorted(merged.values(), key=lambda issue: issue.id)


def get_latest_release(current_sdk_version: str, channel: ReleaseChannel) -> SdkVersions:
    """Work out the update from current_sdk_version within an official channel.

    Args:
        current_sdk_version: The SDK version pinned in global.json.
        channel: The channel's release feed.

    Raises:
        ReleaseNotFoundError: If current_sdk_version or the channel's latest
                              SDK isn't in the feed.
    """
    current = get_release_for_sdk(current_sdk_version, channel)
    latest = get_release_for_sdk(channel.latest_sdk, channel)
    latest = _no_downgrade(current, latest)

    skipped_security, skipped_issues = _skipped_releases_security(current, latest, channel)

    own_issues = latest.security_issues
    if latest.sdk_version == current.sdk_version:
        # Already installed, so none of its advisories are newly fixed
        own_issues = []

    return SdkVersions(
        current=current,
        latest=latest,
        security=latest.security or skipped_security,
        security_issues=_merge_issues(own_issues, skipped_issues, current.security_issues),
    )


def get_latest_daily(
    current_sdk_version: str,
    channel: str,
    quality: str,
    prerelease_label: str = "",
    official: ReleaseChannel | None = None,
) -> SdkVersions:
    """Work out the update from current_sdk_version to the latest daily build.

    Args:
        current_sdk_version: The SDK version pinned in global.json.
        channel: Daily build channel, e.g. "8.0" or "8.0.1xx-preview7".
        quality: One of daily, signed, validated or preview.
        prerelease_label: If set, builds whose prerelease label doesn't
                          start with it are ignored (e.g. "preview.7").
        official: The official release feed, used to resolve the current
                  SDK if it has since been released.

    Daily builds carry no security classification, so the result never
    reports security fixes.
    """
    latest = get_daily_release(channel, quality)

    current: ReleaseInfo | None = None
    if official is not None:
        try:
            current = get_release_for_sdk(current_sdk_version, official)
        except ReleaseNotFoundError:
            current = None
    if current is None:
        current = get_daily_release_for_sdk(current_sdk_version)

    if prerelease_label:
        label = _parse(latest.sdk_version).prerelease
        if not label.startswith(prerelease_label):
            print(
                f"  Ignoring .NET SDK {latest.sdk_version} as it is not a "
                f"{prerelease_label} build"
            )
            latest = current

    return SdkVersions(current=current, latest=_no_downgrade(current, latest, builds=True))


def resolve_update(options: UpdateOptions, current_sdk_version: str) -> SdkVersions:
    """Resolve the channel and work out the update for a run's options."""
    channel = resolve_channel(options, current_sdk_version)

    if options.quality:
        step(f"Checking for {options.quality} builds of .NET {channel}")
        official = try_fetch_release_channel(infer_channel(current_sdk_version))
        return get_latest_daily(
            current_sdk_version,
            channel,
            options.quality,
            options.prerelease_label,
            official,
        )

    step(f"Checking for releases of .NET {channel}")
    return get_latest_release(current_sdk_version, fetch_release_channel(channel))
