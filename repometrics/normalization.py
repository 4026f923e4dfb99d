"""Result normalization applied to executed metric values."""

from __future__ import annotations

from typing import Any, Mapping


def normalize_result(value: Any) -> Any:
    """Render boolean verdicts as the strings ``"true"``/``"false"``.

    Report consumers expect ``{"result": "true"}`` rather than a JSON boolean, so a
    mapping whose ``result`` entry is a bool collapses to that single string entry.
    Every other value is returned unchanged.
    """
    if isinstance(value, Mapping) and isinstance(value.get("result"), bool):
        return {"result": "true" if value["result"] else "false"}
    return value


__all__ = ["normalize_result"]
