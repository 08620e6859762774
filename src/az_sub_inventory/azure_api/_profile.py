"""Read the Azure CLI profile for fields ARM does not return."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _profile_path() -> Path:
    config_dir = os.environ.get("AZURE_CONFIG_DIR") or str(Path.home() / ".azure")
    return Path(config_dir) / "azureProfile.json"


def load_cli_profile(path: Path | None = None) -> dict[str, dict]:
    """Return ``{subscription_id: {"isDefault": bool, "offerType": str}}``.

    The CLI writes the profile with a BOM.  A missing or unreadable
    profile yields an empty mapping.
    """
    path = path or _profile_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        logger.debug("No Azure CLI profile at %s", path)
        return {}
    except (OSError, ValueError):
        logger.warning("Could not read Azure CLI profile at %s", path, exc_info=True)
        return {}

    entries = (data.get("subscriptions") if isinstance(data, dict) else None) or []
    if not isinstance(entries, list):
        logger.warning("Ignoring malformed Azure CLI profile at %s", path)
        return {}

    profile: dict[str, dict] = {}
    for sub in entries:
        if not isinstance(sub, dict):
            continue
        sub_id = sub.get("id")
        if sub_id:
            profile[sub_id] = {
                "isDefault": bool(sub.get("isDefault")),
                "offerType": sub.get("offerType") or "",
            }
    return profile
