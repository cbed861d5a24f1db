"""Helpers for reporting results to a GitHub Actions workflow run."""

from __future__ import annotations

import json

from update_dotnet_sdk.models import UpdateResult


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


def outputs_for(result: UpdateResult) -> dict[str, str]:
    """Map an UpdateResult onto the action's step output names."""
    return {
        "aspnetcore-version": result.aspnetcore_version,
        "branch-name": result.branch_name,
        "pull-request-html-url": result.pull_request_url,
        "pull-request-number": (
            str(result.pull_request_number) if result.pull_request_number else ""
        ),
        "pull-requests-closed": json.dumps(result.superseded),
        "runtime-version": result.runtime_version,
        "sdk-updated": str(result.updated).lower(),
        "sdk-version": result.version,
        "security": str(result.security).lower(),
        "windows-desktop-version": result.windows_desktop_version,
    }


def write_outputs(result: UpdateResult, github_output: str | None) -> None:
    """Append step outputs to $GITHUB_OUTPUT, or print them outside Actions."""
    for name, value in outputs_for(result).items():
        if github_output:
            _write_output(github_output, name, value)
        else:
            print(f"  {name}: {value}")


def write_summary(summary: str, step_summary: str | None) -> None:
    """Append the rendered summary to $GITHUB_STEP_SUMMARY, or print it."""
    if not step_summary:
        print(summary)
        return
    with open(step_summary, "a") as fh:
        fh.write(summary)
