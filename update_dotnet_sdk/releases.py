"""Release metadata resolution.

Two sources of release information are supported:

1. Official release feeds (releases.json per channel), which list every
   release of a channel with its SDK, runtime and security advisories.
2. Product-commit records for daily/preview builds, which identify the
   commits and versions of the latest build for a channel and quality.

Both are turned into ReleaseInfo records. Upstream documents are validated
with Pydantic so a malformed document fails with the name of the field
that is wrong rather than with a KeyError somewhere later.
"""

from __future__ import annotations

import shlex
from datetime import date, datetime, timezone
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import HttpError, ReleaseNotFoundError, ResolutionError
from .fetch import get_json, get_text
from .models import ReleaseInfo, SecurityIssue

RELEASES_URL = (
    "https://builds.dotnet.microsoft.com/dotnet/release-metadata/{channel}/releases.json"
)
DAILY_PRODUCT_COMMIT_URL = "https://aka.ms/dotnet/{channel}/{quality}/productCommit-win-x64"
SDK_PRODUCT_COMMIT_URL = "https://ci.dot.net/public/Sdk/{version}/productCommit-win-x64"

COMMITS_URL = "https://github.com/dotnet/{repo}/commits/{commit}"

# Release date for builds whose version carries no build number
UNKNOWN_RELEASE_DATE = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Components of a product-commit record
COMPONENTS = ("dotnet", "installer", "sdk", "runtime", "aspnetcore", "windowsdesktop")


# ---------------------------------------------------------------------------
# Official release feeds
# ---------------------------------------------------------------------------


class Cve(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="cve-id")
    url: str = Field(alias="cve-url")


class ComponentVersion(BaseModel):
    version: str


class Release(BaseModel):
    """One entry of the "releases" array of a release feed."""

    model_config = ConfigDict(populate_by_name=True)

    release_date: date = Field(alias="release-date")
    release_notes: str = Field(alias="release-notes")
    security: bool = False
    cve_list: list[Cve] = Field(default_factory=list, alias="cve-list")
    runtime: ComponentVersion
    sdk: ComponentVersion
    sdks: list[ComponentVersion] = Field(default_factory=list)
    aspnetcore_runtime: ComponentVersion | None = Field(
        default=None, alias="aspnetcore-runtime"
    )
    windowsdesktop: ComponentVersion | None = None

    @field_validator("cve_list", "sdks", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ReleaseChannel(BaseModel):
    """A channel's release feed (e.g. release-metadata/8.0/releases.json)."""

    model_config = ConfigDict(populate_by_name=True)

    latest_sdk: str = Field(alias="latest-sdk")
    releases: list[Release]


def parse_release_channel(data: Any, channel: str) -> ReleaseChannel:
    """Validate a release feed document.

    Raises:
        ResolutionError: If required fields are missing or malformed.
    """
    try:
        return ReleaseChannel.model_validate(data)
    except ValidationError as exc:
        raise ResolutionError(
            f"The release metadata for .NET channel {channel} is invalid: {exc}"
        ) from exc


def fetch_release_channel(channel: str) -> ReleaseChannel:
    """Download and validate the release feed for a channel (e.g. "8.0")."""
    url = RELEASES_URL.format(channel=channel)
    print(f"  Downloading .NET {channel} release notes JSON from {url}")
    return parse_release_channel(get_json(url), channel)


def try_fetch_release_channel(channel: str) -> ReleaseChannel | None:
    """Like fetch_release_channel(), but returns None if the channel has no feed yet."""
    try:
        return fetch_release_channel(channel)
    except HttpError as exc:
        if exc.status_code != 404:
            raise
        print(f"  No release notes found for .NET {channel}")
        return None


def _to_release_info(release: Release, sdk_version: str) -> ReleaseInfo:
    return ReleaseInfo(
        sdk_version=sdk_version,
        runtime_version=release.runtime.version,
        aspnetcore_version=(
            release.aspnetcore_runtime.version if release.aspnetcore_runtime else None
        ),
        windows_desktop_version=(
            release.windowsdesktop.version if release.windowsdesktop else None
        ),
        release_date=datetime.combine(
            release.release_date, datetime.min.time(), tzinfo=timezone.utc
        ),
        release_notes=release.release_notes,
        security=release.security,
        security_issues=map_cves(release.cve_list),
    )


def map_cves(cves: list[Cve]) -> list[SecurityIssue]:
    return [SecurityIssue(id=cve.id, url=cve.url) for cve in cves]


def get_release_for_sdk(sdk_version: str, channel: ReleaseChannel) -> ReleaseInfo:
    """Find the release that shipped an SDK version.

    Each release's primary SDK is checked first. Only if no release ships
    the version as its primary SDK are the alternate feature-band SDKs in
    each release's "sdks" list searched.

    Raises:
        ReleaseNotFoundError: If no release contains the SDK version.
    """
    for release in channel.releases:
        if release.sdk.version == sdk_version:
            return _to_release_info(release, sdk_version)

    for release in channel.releases:
        if any(sdk.version == sdk_version for sdk in release.sdks):
            return _to_release_info(release, sdk_version)

    raise ReleaseNotFoundError(
        f"Failed to find release for .NET SDK version {sdk_version}"
    )


def find_release_for_runtime(runtime_version: str, channel: ReleaseChannel) -> Release | None:
    """Return the release that shipped a runtime version, if any."""
    for release in channel.releases:
        if release.runtime.version == runtime_version:
            return release
    return None


# ---------------------------------------------------------------------------
# Daily builds
# ---------------------------------------------------------------------------


class ComponentCommit(BaseModel):
    commit: str | None = None
    version: str | None = None


class StructuredProductCommit(BaseModel):
    """The JSON product-commit record (productCommit-win-x64.json)."""

    dotnet: ComponentCommit | None = None
    installer: ComponentCommit | None = None
    sdk: ComponentCommit | None = None
    runtime: ComponentCommit | None = None
    aspnetcore: ComponentCommit | None = None
    windowsdesktop: ComponentCommit | None = None


class LegacyProductCommit(BaseModel):
    """The key=value text product-commit record (productCommit-win-x64.txt)."""

    values: dict[str, str]

    @classmethod
    def parse(cls, text: str) -> LegacyProductCommit:
        """Read every key="value" pair; a line may hold several.

        Raises:
            ResolutionError: If a line has an unterminated quote.
        """
        values: dict[str, str] = {}
        for line in text.splitlines():
            try:
                tokens = shlex.split(line, comments=True)
            except ValueError as exc:
                raise ResolutionError(
                    f"Invalid product commit line '{line.strip()}': {exc}"
                ) from exc
            for token in tokens:
                key, sep, value = token.partition("=")
                if sep:
                    values[key.strip().lower()] = value.strip()
        return cls(values=values)

    def component(self, name: str) -> ComponentCommit:
        return ComponentCommit(
            commit=self.values.get(f"{name}_commit") or None,
            version=self.values.get(f"{name}_version") or None,
        )


ProductCommitDocument = Union[StructuredProductCommit, LegacyProductCommit]


class ProductCommit(BaseModel):
    """Canonical record of the commits and versions that make up a build."""

    model_config = ConfigDict(frozen=True)

    sdk_version: str
    runtime_version: str
    aspnetcore_version: str | None = None
    windows_desktop_version: str | None = None
    dotnet_commit: str | None = None
    installer_commit: str | None = None
    sdk_commit: str | None = None

    @property
    def commits_url(self) -> str:
        """Commit history URL, preferring the combined dotnet/dotnet repository."""
        for repo, commit in (
            ("dotnet", self.dotnet_commit),
            ("installer", self.installer_commit),
            ("sdk", self.sdk_commit),
        ):
            if commit:
                return COMMITS_URL.format(repo=repo, commit=commit)
        raise ResolutionError(
            f"No commit was found for .NET SDK version {self.sdk_version}"
        )


def to_product_commit(document: ProductCommitDocument, source: str) -> ProductCommit:
    """Convert either product-commit variant into a ProductCommit.

    Raises:
        ResolutionError: If the SDK or runtime version is missing.
    """
    if isinstance(document, LegacyProductCommit):
        parts = {name: document.component(name) for name in COMPONENTS}
    else:
        parts = {
            name: getattr(document, name) or ComponentCommit() for name in COMPONENTS
        }

    sdk_version = parts["sdk"].version or parts["installer"].version
    if not sdk_version:
        raise ResolutionError(f"The product commit record {source} has no sdk version")
    runtime_version = parts["runtime"].version
    if not runtime_version:
        raise ResolutionError(
            f"The product commit record {source} has no runtime version"
        )

    return ProductCommit(
        sdk_version=sdk_version,
        runtime_version=runtime_version,
        aspnetcore_version=parts["aspnetcore"].version,
        windows_desktop_version=parts["windowsdesktop"].version,
        dotnet_commit=parts["dotnet"].commit,
        installer_commit=parts["installer"].commit,
        sdk_commit=parts["sdk"].commit,
    )


def fetch_product_commit(base_url: str) -> ProductCommit:
    """Fetch a product-commit record, preferring the JSON form.

    The legacy text form is only tried if the JSON form does not exist
    (HTTP 404). Any other failure is fatal.
    """
    json_url = f"{base_url}.json"
    try:
        data = get_json(json_url)
    except HttpError as exc:
        if exc.status_code != 404:
            raise
        text_url = f"{base_url}.txt"
        return to_product_commit(LegacyProductCommit.parse(get_text(text_url)), text_url)

    try:
        document = StructuredProductCommit.model_validate(data)
    except ValidationError as exc:
        raise ResolutionError(f"The product commit record {json_url} is invalid: {exc}") from exc
    return to_product_commit(document, json_url)


def release_date_from_build(sdk_version: str) -> datetime:
    """Decode the build date embedded in a daily SDK version.

    Daily builds encode their date in the fifth dot-separated segment as
    YYMMDD packed into YY * 1000 + MM * 50 + DD, e.g. the 23376 in
    8.0.100-preview.7.23376.3 is 2023-07-26.

    Raises:
        ResolutionError: If the version has no valid build number.
    """
    segments = sdk_version.split(".")
    if len(segments) < 5 or not segments[4].isdigit():
        raise ResolutionError(
            f"Unable to determine the build date of .NET SDK version {sdk_version}"
        )

    build_number = int(segments[4])
    year = 2000 + build_number // 1000
    day_of_year = build_number % 1000
    month = day_of_year // 50
    day = day_of_year - month * 50

    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError as exc:
        raise ResolutionError(
            f"Unable to determine the build date of .NET SDK version {sdk_version}: {exc}"
        ) from exc


def _daily_release_info(product: ProductCommit, release_date: datetime) -> ReleaseInfo:
    return ReleaseInfo(
        sdk_version=product.sdk_version,
        runtime_version=product.runtime_version,
        aspnetcore_version=product.aspnetcore_version,
        windows_desktop_version=product.windows_desktop_version,
        release_date=release_date,
        release_notes=product.commits_url,
    )


def get_daily_release(channel: str, quality: str) -> ReleaseInfo:
    """Resolve the most recent build of a channel at a given quality."""
    url = DAILY_PRODUCT_COMMIT_URL.format(channel=channel, quality=quality)
    print(f"  Downloading latest {quality} .NET {channel} build information from {url}")
    product = fetch_product_commit(url)
    return _daily_release_info(product, release_date_from_build(product.sdk_version))


def get_daily_release_for_sdk(sdk_version: str) -> ReleaseInfo:
    """Resolve an SDK build from its own product-commit record.

    The SDK may be a stable version missing from the official feed, which
    has no build number to date it; UNKNOWN_RELEASE_DATE is used instead.
    """
    url = SDK_PRODUCT_COMMIT_URL.format(version=sdk_version)
    print(f"  Downloading .NET SDK {sdk_version} build information from {url}")
    product = fetch_product_commit(url)
    try:
        release_date = release_date_from_build(product.sdk_version)
    except ResolutionError:
        release_date = UNKNOWN_RELEASE_DATE
    return _daily_release_info(product, release_date)
