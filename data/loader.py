"""
Payload loading for offline runs.
Reads per-bureau JSON payloads and the submitted form from one directory.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from config.settings import PAYLOAD_DIR
from schemas.source import SOURCE_ORDER, Bureau

logger = logging.getLogger(__name__)

FORM_FILE = "form.json"
FLEXID_FILE = "flexid.json"
FRAUD_FINDER_FILE = "fraud_finder.json"


def _load_json(path: str) -> Optional[Dict[str, Any]]:
    """Load one JSON object. Missing or unreadable files load as None."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def load_bureau_payloads(payload_dir: str = PAYLOAD_DIR) -> Dict[Bureau, Optional[Dict[str, Any]]]:
    """
    Load <bureau>.json for every bureau.

    Args:
        payload_dir: Directory holding experian.json, transunion.json, equifax.json

    Returns:
        Dict with one entry per bureau; None where the file is absent
    """
    payloads = {}
    for source in SOURCE_ORDER:
        payloads[source] = _load_json(os.path.join(payload_dir, f"{source.value}.json"))
    loaded = sum(1 for p in payloads.values() if p is not None)
    print(f"Loaded {loaded} bureau payloads from {payload_dir}")
    return payloads


def load_form(payload_dir: str = PAYLOAD_DIR) -> Dict[str, Any]:
    """Load the submitted identity form (empty dict if absent)."""
    return _load_json(os.path.join(payload_dir, FORM_FILE)) or {}


def load_identity_payloads(payload_dir: str = PAYLOAD_DIR) -> Dict[str, Optional[Dict[str, Any]]]:
    """Load optional FlexID and Fraud Finder responses."""
    return {
        "flexid": _load_json(os.path.join(payload_dir, FLEXID_FILE)),
        "fraud_finder": _load_json(os.path.join(payload_dir, FRAUD_FINDER_FILE)),
    }
