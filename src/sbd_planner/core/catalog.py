"""
YAML exercise catalog loader.

Loads the exercise catalog bundled as ``src/sbd_planner/catalog.yaml``.

User overrides: ``~/.sbd-planner/catalog.yaml`` with the same layout.
Entries with the same (name, base_lift) replace bundled ones, new entries
are appended. A broken user file is ignored with a warning; a broken
bundled file is an error, since no plan can be persisted without it.
"""

import os
import warnings
from pathlib import Path

import yaml

from .config import LIFTS

_TRACKING_MODES: frozenset[str] = frozenset({"e1rm", "volume", "none"})


def entry_from_dict(d: dict) -> dict:
    """
    Normalise one raw catalog entry.

    Raises:
        ValueError: If name or base_lift is missing or invalid
    """
    if not isinstance(d, dict):
        raise ValueError(f"catalog entry must be a mapping, got {d!r}")
    name = d.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"catalog entry needs a non-empty name: {d!r}")
    base_lift = d.get("base_lift")
    if base_lift not in LIFTS:
        raise ValueError(f"{name}: base_lift must be one of {LIFTS}, got {base_lift!r}")
    tracking_mode = d.get("tracking_mode", "none")
    if tracking_mode not in _TRACKING_MODES:
        raise ValueError(f"{name}: unknown tracking_mode {tracking_mode!r}")
    return {
        "name": name.strip(),
        "base_lift": base_lift,
        "is_main_lift": bool(d.get("is_main_lift", False)),
        "tracking_mode": tracking_mode,
    }


def _entries_from_file(path: Path) -> list[dict]:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict) or not isinstance(data.get("exercises"), list):
        raise ValueError(f"{path}: expected a top-level 'exercises' list")
    return [entry_from_dict(raw) for raw in data["exercises"]]


def get_bundled_catalog_path() -> Path:
    """Return the path of the bundled catalog.yaml."""
    # catalog.py lives at src/sbd_planner/core/catalog.py
    return Path(__file__).parent.parent / "catalog.yaml"


def get_user_catalog_path() -> Path | None:
    """Return ~/.sbd-planner/catalog.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".sbd-planner" / "catalog.yaml"
    return p if p.exists() else None


def load_catalog_entries(user_path: Path | None = None) -> list[dict]:
    """
    Return the catalog entries, bundled file merged with the user override.

    Args:
        user_path: Override file to merge; defaults to get_user_catalog_path()

    Raises:
        RuntimeError: If the bundled catalog cannot be read
    """
    bundled_path = get_bundled_catalog_path()
    try:
        entries = _entries_from_file(bundled_path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise RuntimeError(f"Bundled exercise catalog is unusable: {e}") from e

    if user_path is None:
        user_path = get_user_catalog_path()
    if user_path is None:
        return entries

    try:
        overrides = _entries_from_file(user_path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        warnings.warn(
            f"sbd-planner: ignoring user catalog {user_path} ({e})",
            stacklevel=2,
        )
        return entries

    merged = {(e["name"], e["base_lift"]): e for e in entries}
    for e in overrides:
        merged[(e["name"], e["base_lift"])] = e
    return list(merged.values())
