"""Publishing an SDK update: branch → commit → push → pull request.

The branch name is derived from the target version, so running the update
again for a version that has already been proposed finds the branch on the
remote and stops without committing anything.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .config import UpdateOptions
from .errors import GitHubError
from .github import GitHubClient
from .messages import (
    commit_message_for,
    generate_pull_request_body,
    generate_pull_request_title,
    pull_request_title_prefix,
)
from .models import PullRequest, SdkVersions
from .shell import git, step, warning


class Publication(BaseModel):
    """What the publisher produced for an update.

    Attributes:
        branch: The branch the update was committed to.
        pull_request: The created pull request; None in dry-run mode.
        superseded: Numbers of older update pull requests that were closed.
    """

    model_config = ConfigDict(frozen=True)

    branch: str
    pull_request: PullRequest | None = None
    superseded: list[int] = Field(default_factory=list)


def branch_name_for(version: str, options: UpdateOptions) -> str:
    """The configured branch, or update-dotnet-sdk-{version} in lower case."""
    return options.branch or f"update-dotnet-sdk-{version}".lower()


def remote_branch_exists(branch: str, options: UpdateOptions) -> bool:
    output = git(
        "rev-parse",
        "--verify",
        "--quiet",
        f"remotes/origin/{branch}",
        cwd=options.repo_path,
        check=False,
    )
    return bool(output)


def commit_update(update: SdkVersions, branch: str, options: UpdateOptions) -> None:
    """Create the branch and commit the global.json change to it."""
    cwd = options.repo_path

    if options.user_name:
        git("config", "user.name", options.user_name, cwd=cwd)
        print(f"  Updated git user name to '{options.user_name}'")

    if options.user_email:
        git("config", "user.email", options.user_email, cwd=cwd)
        print(f"  Updated git user email to '{options.user_email}'")

    git("checkout", "-b", branch, cwd=cwd)
    print(f"  Created git branch {branch}")

    git("add", str(options.global_json_path), cwd=cwd)
    print(f"  Staged git commit for '{options.global_json_path}'")

    git("commit", "-s", "-m", commit_message_for(update, options), cwd=cwd)
    sha = git("log", "--format=%H", "-n", "1", cwd=cwd)
    print(f"  Committed .NET SDK update to git ({sha[:7]})")

    if not options.dry_run:
        git("push", "-u", "origin", branch, cwd=cwd)
        print(f"  Pushed changes to repository ({options.repo})")


def create_pull_request(
    update: SdkVersions, branch: str, base: str, options: UpdateOptions, client: GitHubClient
) -> PullRequest:
    """Open the pull request and apply the configured labels.

    Labeling failures are reported as warnings; the pull request stands.
    """
    version = update.latest.sdk_version
    pull_request = client.create_pull_request(
        title=generate_pull_request_title(version, options),
        head=branch,
        base=base,
        body=generate_pull_request_body(update, options),
    )
    print(f"  Created pull request #{pull_request.number}: {pull_request.url}")

    if options.labels:
        try:
            client.add_labels(pull_request.number, list(options.labels))
            print(f"  Applied labels: {', '.join(options.labels)}")
        except GitHubError as exc:
            warning(f"Failed to apply label(s) to pull request #{pull_request.number}: {exc}")

    return pull_request


def close_superseded(
    pull_request: PullRequest, base: str, options: UpdateOptions, client: GitHubClient
) -> list[int]:
    """Close older open update pull requests that pull_request replaces.

    A pull request is superseded if it targets the same base, was opened by
    the same user and has the same title prefix.
    """
    step("Closing superseded pull requests")

    title_prefix = pull_request_title_prefix(options)
    superseded: list[int] = []

    for candidate in client.list_open_pull_requests(base):
        if candidate.number == pull_request.number:
            continue
        if candidate.user_login != pull_request.user_login:
            continue
        if not candidate.title.startswith(title_prefix):
            continue

        client.create_comment(candidate.number, f"Superseded by #{pull_request.number}.")
        client.close_pull_request(candidate.number)
        if candidate.head_ref:
            client.delete_branch(candidate.head_ref)
        print(f"  Closed pull request #{candidate.number}")
        superseded.append(candidate.number)

    if not superseded:
        print("  No superseded pull requests found")
    return superseded


def publish_update(
    update: SdkVersions, options: UpdateOptions, client: GitHubClient | None
) -> Publication | None:
    """Commit the update and propose it as a pull request.

    Args:
        update: The update to publish; global.json must already be updated.
        options: Run options.
        client: GitHub client; only used when not in dry-run mode.

    Returns:
        The publication, or None if the branch already exists on the remote
        (the update was already proposed by an earlier run).

    Raises:
        GitError: If any git command fails.
    """
    step("Publishing update")
    cwd = options.repo_path
    branch = branch_name_for(update.latest.sdk_version, options)

    if options.repo:
        git(
            "remote",
            "set-url",
            "origin",
            f"{options.server_url.rstrip('/')}/{options.repo}.git",
            cwd=cwd,
        )
        git("fetch", "origin", cwd=cwd)

    base = git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)

    if remote_branch_exists(branch, options):
        print(f"  The {branch} branch already exists")
        return None

    commit_update(update, branch, options)

    if options.dry_run:
        print("  Skipped creating GitHub Pull Request as dry-run mode is enabled")
        return Publication(branch=branch)
    if client is None:
        print("  Skipped creating GitHub Pull Request as no repository is configured")
        return Publication(branch=branch)

    pull_request = create_pull_request(update, branch, base, options, client)

    superseded: list[int] = []
    if options.close_superseded:
        superseded = close_superseded(pull_request, base, options, client)

    return Publication(branch=branch, pull_request=pull_request, superseded=superseded)
