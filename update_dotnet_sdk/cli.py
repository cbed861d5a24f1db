"""CLI entry point for update-dotnet-sdk."""

from __future__ import annotations

import argparse
import os
import traceback
from importlib.metadata import version as pkg_version

from update_dotnet_sdk.config import QUALITIES, UpdateOptions, load_options
from update_dotnet_sdk.pipeline import check_update, run_update
from update_dotnet_sdk.shell import fatal, step
from update_dotnet_sdk.workflow_steps import write_outputs, write_summary

__version__ = pkg_version("update-dotnet-sdk")

# (input name, help) for every action input; each becomes a --flag
INPUTS: list[tuple[str, str]] = [
    ("repo-token", "GitHub token for pushing and opening pull requests."),
    ("global-json-file", "Path of the global.json file to update."),
    ("branch-name", "Branch to commit to. (default: update-dotnet-sdk-<version>)"),
    ("channel", "Release channel, e.g. 8.0. Inferred from global.json if omitted."),
    ("quality", f"Use daily builds of this quality ({', '.join(QUALITIES)})."),
    ("prerelease-label", "Only use daily builds with this prerelease label, e.g. rc.1."),
    ("commit-message", "Commit message to use instead of the generated one."),
    ("commit-message-prefix", "Prefix for the commit message and pull request title."),
    ("labels", "Comma-separated labels to apply to the pull request."),
    ("user-name", "Git user name for the commit."),
    ("user-email", "Git user email for the commit."),
]

FLAGS: list[tuple[str, str]] = [
    ("dry-run", "Commit locally but don't push or open a pull request."),
    ("security-only", "Only update if the update contains security fixes."),
    ("close-superseded", "Close older pull requests that update the .NET SDK."),
    ("generate-step-summary", "Write a summary for the workflow run."),
]


def _input(name: str) -> str:
    """Read an action input from the environment (INPUT_GLOBAL-JSON-FILE etc.)."""
    return os.environ.get(f"INPUT_{name.upper()}", "")


def _options(args: argparse.Namespace) -> UpdateOptions:
    inputs: dict[str, str | None] = {}
    for name, _ in INPUTS:
        inputs[name] = getattr(args, name.replace("-", "_"))
    for name, _ in FLAGS:
        value = getattr(args, name.replace("-", "_"))
        inputs[name] = "true" if value else _input(name)
    if not inputs["repo-token"]:
        inputs["repo-token"] = os.environ.get("GITHUB_TOKEN", "")
    return load_options(inputs, os.environ)


def cmd_run(args: argparse.Namespace) -> None:
    """Check for an SDK update and propose it as a pull request."""
    options = _options(args)
    result = run_update(options)

    step("Writing outputs")
    write_outputs(result, os.environ.get("GITHUB_OUTPUT"))
    if result.summary:
        write_summary(result.summary, os.environ.get("GITHUB_STEP_SUMMARY"))


def cmd_check(args: argparse.Namespace) -> None:
    """Print the current and latest releases without changing anything."""
    options = _options(args)
    update = check_update(options)
    print(update.model_dump_json(indent=2))


def _add_inputs(parser: argparse.ArgumentParser) -> None:
    for name, help_text in INPUTS:
        parser.add_argument(f"--{name}", default=_input(name), help=help_text)
    for name, help_text in FLAGS:
        parser.add_argument(f"--{name}", action="store_true", help=help_text)


def cli(argv: list[str] | None = None) -> None:
    """Main CLI entry point.

    All failures are reported here: the traceback is printed and the
    process exits with status 1.
    """
    parser = argparse.ArgumentParser(
        prog="update-dotnet-sdk",
        description="Update the .NET SDK version pinned in global.json.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run", help="Update global.json and open a pull request (usually called from CI)."
    )
    _add_inputs(run_parser)
    run_parser.set_defaults(func=cmd_run)

    check_parser = subparsers.add_parser(
        "check", help="Show the current and latest .NET SDK without changing anything."
    )
    _add_inputs(check_parser)
    check_parser.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as exc:
        print("Failed to check for updates to .NET SDK")
        traceback.print_exc()
        fatal(str(exc))


if __name__ == "__main__":
    cli()
