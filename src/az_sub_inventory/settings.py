"""Inventory settings loaded from environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from az_sub_inventory.models.inventory import ReportMode


class InventorySettings(BaseSettings):
    """Configuration for az-sub-inventory.

    Values are read from ``AZ_SUB_INVENTORY_*`` environment variables
    (case-insensitive) and optionally from a ``.env`` file in the working
    directory.  Command-line options take precedence.
    """

    tenant_id: str = ""
    output_dir: Path = Path(".")
    mode: ReportMode = ReportMode.focused
    write_json: bool = False
    request_timeout: float = Field(default=30, gt=0)
    file_prefix: str = "azure_env_discovery"

    model_config = {
        "env_prefix": "AZ_SUB_INVENTORY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
