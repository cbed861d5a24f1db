"""Data models for update-dotnet-sdk.

These Pydantic models represent the records passed between the resolver,
the decision engine, the publisher and the platform outputs. They are all
frozen: a record is created once and only read afterwards.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SecurityIssue(BaseModel):
    """A security advisory fixed by a release.

    Attributes:
        id: Advisory identifier, e.g. "CVE-2023-21808".
        url: Link to the advisory.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    url: str


class ReleaseInfo(BaseModel):
    """A single resolved .NET release for one SDK version.

    Attributes:
        sdk_version: The SDK version this record was resolved for.
        runtime_version: The .NET runtime shipped with the SDK.
        aspnetcore_version: The ASP.NET Core runtime version, if known.
        windows_desktop_version: The Windows desktop runtime version, if known.
        release_date: When the release (or daily build) was produced, in UTC.
        release_notes: URL of the release notes, or of the commit history
                       for unreleased builds.
        security: Whether the release is flagged as a security release.
        security_issues: Advisories fixed by the release.
    """

    model_config = ConfigDict(frozen=True)

    sdk_version: str
    runtime_version: str
    aspnetcore_version: str | None = None
    windows_desktop_version: str | None = None
    release_date: datetime
    release_notes: str
    security: bool = False
    security_issues: list[SecurityIssue] = Field(default_factory=list)


class SdkVersions(BaseModel):
    """The outcome of one update check.

    Attributes:
        current: The release for the SDK version pinned in global.json.
        latest: The release the SDK should be updated to. Equal to
                current when there is nothing newer.
        security: True if latest, or any patch release skipped between
                  current and latest, is a security release.
        security_issues: Advisories fixed between current and latest,
                         sorted by identifier.
    """

    model_config = ConfigDict(frozen=True)

    current: ReleaseInfo
    latest: ReleaseInfo
    security: bool = False
    security_issues: list[SecurityIssue] = Field(default_factory=list)

    @property
    def has_update(self) -> bool:
        return self.current.sdk_version != self.latest.sdk_version


class PullRequest(BaseModel):
    """A pull request created (or superseded) by the publisher."""

    model_config = ConfigDict(frozen=True)

    number: int
    url: str
    title: str = ""
    head_ref: str = ""
    user_login: str = ""


class UpdateResult(BaseModel):
    """Result of a run, mapped one-to-one onto the step outputs.

    Attributes:
        updated: Whether global.json was updated and a pull request proposed.
        version: The latest SDK version for the channel.
        branch_name: The branch the update was committed to, if any.
        pull_request_number: Number of the created pull request, if any.
        pull_request_url: URL of the created pull request, if any.
        security: Whether the update contains security fixes.
        superseded: Numbers of the pull requests closed as superseded.
        runtime_version: Runtime version of the latest release.
        aspnetcore_version: ASP.NET Core version of the latest release.
        windows_desktop_version: Windows desktop version of the latest release.
        summary: Rendered step summary, when one was requested.
    """

    model_config = ConfigDict(frozen=True)

    updated: bool = False
    version: str = ""
    branch_name: str = ""
    pull_request_number: int | None = None
    pull_request_url: str = ""
    security: bool = False
    superseded: list[int] = Field(default_factory=list)
    runtime_version: str = ""
    aspnetcore_version: str = ""
    windows_desktop_version: str = ""
    summary: str | None = None
