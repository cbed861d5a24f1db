"""Run configuration.

UpdateOptions is built once from the action inputs and the GitHub Actions
environment, then passed explicitly to each stage of the pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigurationError
from .versions import SdkVersion

QUALITIES = ("daily", "signed", "validated", "preview")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"


class UpdateOptions(BaseModel):
    """Immutable options for one update run.

    Attributes:
        access_token: Token used for the GitHub REST API.
        global_json_path: Absolute path of the global.json file to update.
        branch: Branch to commit to; derived from the version if empty.
        channel: Release channel; inferred from the current SDK if empty.
        quality: Daily build quality; official releases are used if empty.
        prerelease_label: Only accept daily builds whose label starts with this.
        commit_message: Commit message; generated if empty.
        commit_message_prefix: Prefix for the commit message and PR title.
        labels: Labels to apply to the pull request.
        dry_run: Commit locally but don't push or open a pull request.
        security_only: Only update if the update contains security fixes.
        close_superseded: Close older update pull requests.
        generate_step_summary: Render a summary for the workflow run.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    global_json_path: Path
    api_url: str = DEFAULT_API_URL
    server_url: str = DEFAULT_SERVER_URL
    branch: str = ""
    channel: str = ""
    quality: str = ""
    prerelease_label: str = ""
    commit_message: str = ""
    commit_message_prefix: str = ""
    labels: tuple[str, ...] = ()
    dry_run: bool = False
    security_only: bool = False
    close_superseded: bool = False
    generate_step_summary: bool = False
    repo: str = ""
    run_id: str = ""
    user_email: str = ""
    user_name: str = ""

    @field_validator("quality")
    @classmethod
    def _check_quality(cls, value: str) -> str:
        if value and value not in QUALITIES:
            raise ValueError(
                f"Invalid quality '{value}' specified. "
                f"Valid values are: {', '.join(QUALITIES)}."
            )
        return value

    @property
    def repo_path(self) -> Path:
        """The working tree that contains global.json."""
        return self.global_json_path.parent

    @property
    def is_github_enterprise(self) -> bool:
        return self.server_url.rstrip("/") != DEFAULT_SERVER_URL


def parse_labels(value: str) -> tuple[str, ...]:
    """Split a comma-separated label list, dropping blanks."""
    return tuple(label.strip() for label in value.split(",") if label.strip())


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def load_options(inputs: Mapping[str, str | None], environ: Mapping[str, str]) -> UpdateOptions:
    """Build UpdateOptions from action inputs and the workflow environment.

    Args:
        inputs: Action inputs keyed by input name (e.g. "global-json-file").
        environ: Environment variables providing the GitHub context.

    Raises:
        ConfigurationError: If a required input is missing or invalid.
    """

    def value(name: str) -> str:
        return (inputs.get(name) or "").strip()

    access_token = value("repo-token")
    if not access_token:
        raise ConfigurationError("No GitHub access token specified.")

    global_json_file = value("global-json-file")
    if not global_json_file:
        raise ConfigurationError("No path to global.json file specified.")

    global_json_path = Path(global_json_file).resolve()
    if not global_json_path.is_file():
        raise ConfigurationError(
            f"The global.json file '{global_json_path}' cannot be found."
        )

    try:
        return UpdateOptions(
            access_token=access_token,
            global_json_path=global_json_path,
            api_url=environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
            server_url=environ.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
            branch=value("branch-name"),
            channel=value("channel"),
            quality=value("quality"),
            prerelease_label=value("prerelease-label"),
            commit_message=value("commit-message"),
            commit_message_prefix=value("commit-message-prefix"),
            labels=parse_labels(value("labels")),
            dry_run=_flag(inputs.get("dry-run")),
            security_only=_flag(inputs.get("security-only")),
            close_superseded=_flag(inputs.get("close-superseded")),
            generate_step_summary=_flag(inputs.get("generate-step-summary")),
            repo=environ.get("GITHUB_REPOSITORY", ""),
            run_id=environ.get("GITHUB_RUN_ID", ""),
            user_email=value("user-email"),
            user_name=value("user-name"),
        )
    except ValidationError as exc:
        messages = "; ".join(
            error["msg"].removeprefix("Value error, ") for error in exc.errors()
        )
        raise ConfigurationError(messages) from exc


def infer_channel(sdk_version: str) -> str:
    """Derive the major.minor channel of an SDK version (8.0.100 → 8.0).

    Raises:
        ConfigurationError: If the version has fewer than two numeric components.
    """
    version = SdkVersion.try_parse(sdk_version)
    if version is None or version.minor < 0:
        raise ConfigurationError(
            f"Unable to determine the .NET release channel from SDK version '{sdk_version}'."
        )
    return f"{version.major}.{version.minor}"


def resolve_channel(options: UpdateOptions, sdk_version: str) -> str:
    """Return the configured channel, or the one inferred from sdk_version."""
    return options.channel or infer_channel(sdk_version)
