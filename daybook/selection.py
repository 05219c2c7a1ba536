"""
Selected-society lookup.

The society picker lives outside this package and persists its choice in
client-local storage under a fixed key. Here that storage is a JSON file;
this module only reads it.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Optional
from loguru import logger

SELECTED_SOCIETY_KEY = "selectedSocietyId"


def read_selected_society(state_file: Path) -> Optional[str]:
    """
    Return the selected society id, or None when nothing is selected.

    A missing file, a missing/blank key and an unreadable file all mean
    "not selected".
    """
    path = Path(state_file)
    if not path.exists():
        logger.debug(f"No local storage at {path}")
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read selected society from {path}: {e}")
        return None
    if not isinstance(data, dict):
        return None
    value = data.get(SELECTED_SOCIETY_KEY)
    if value is None:
        return None
    value = str(value).strip()
    return value or None
