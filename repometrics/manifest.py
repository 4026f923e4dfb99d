"""Dependency manifest loading for working copies."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .errors import ManifestInvalid, ManifestMissing

DEFAULT_MANIFEST = "package.json"


def load_manifest(working_dir: Path | str, filename: str = DEFAULT_MANIFEST) -> Dict[str, Any]:
    """Read and parse the JSON manifest at the root of ``working_dir``."""
    path = Path(working_dir) / filename
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestMissing(path) from exc
    except OSError as exc:
        raise ManifestInvalid(path, str(exc)) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestInvalid(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ManifestInvalid(path, "expected a JSON object at the root")
    return data


__all__ = ["DEFAULT_MANIFEST", "load_manifest"]
