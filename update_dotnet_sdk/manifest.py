"""global.json reading and rewriting.

The SDK version is changed by replacing the quoted version string in the
original text rather than by re-serializing the JSON, so indentation, key
order, comments and line endings are left exactly as they were.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from .errors import ConfigurationError


def load_global_json(path: Path) -> tuple[str, str]:
    """Read global.json and the SDK version it pins.

    Returns:
        Tuple of (original text, sdk.version).

    Raises:
        ConfigurationError: If the file is not JSON or has no sdk.version.
    """
    text = path.read_bytes().decode("utf-8")
    try:
        doc = json.loads(text.lstrip("\ufeff"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"'{path}' is not a valid JSON file: {exc}") from exc

    sdk = doc.get("sdk") if isinstance(doc, dict) else None
    version = sdk.get("version") if isinstance(sdk, dict) else None
    if not version or not isinstance(version, str):
        raise ConfigurationError(f".NET SDK version cannot be found in '{path}'.")

    return text, version


def replace_sdk_version(text: str, current: str, latest: str) -> str:
    """Replace every quoted occurrence of current with latest.

    Other fields pinned to the same version (e.g. msbuild-sdks entries)
    are updated too. Text that doesn't contain "current" is returned as is.

    Examples:
        replace_sdk_version('{"sdk":{"version":"8.0.100"}}', "8.0.100", "8.0.200")
            → '{"sdk":{"version":"8.0.200"}}'
    """
    pattern = re.compile(f'"{re.escape(current)}"')
    return pattern.sub(lambda _: f'"{latest}"', text)


def update_global_json(path: Path, text: str, current: str, latest: str) -> None:
    """Write global.json with the SDK version changed from current to latest."""
    path.write_bytes(replace_sdk_version(text, current, latest).encode("utf-8"))
