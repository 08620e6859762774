"""CSV and JSON writers for the inventory report."""

from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from az_sub_inventory.models.inventory import (
    MISSING,
    MISSING_OWNERS,
    ReportDocument,
    ReportMode,
    ReportRow,
)

logger = logging.getLogger(__name__)

FOCUSED_COLUMNS: list[str] = [
    "Subscription ID",
    "Sub. Type",
    "Sub. Owner",
    "Transferable (Internal)",
]

EXTENDED_COLUMNS: list[str] = [
    "TenantName",
    "TenantId",
    "SubscriptionId",
    "SubscriptionName",
    "State",
    "OfferType",
    "QuotaId",
    "SpendingLimit",
    "PlanGuess",
    "BillingAgreementType",
    "IsDefault",
    "Owners",
    "Sub. Owner",
    "Transferable (Internal)",
]


def columns_for(mode: ReportMode) -> list[str]:
    return EXTENDED_COLUMNS if mode == ReportMode.extended else FOCUSED_COLUMNS


def timestamped_path(
    output_dir: Path,
    prefix: str,
    suffix: str,
    now: datetime | None = None,
) -> Path:
    """Return ``output_dir/{prefix}_{YYYYmmdd_HHMMSS}{suffix}``."""
    ts = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return Path(output_dir) / f"{prefix}_{ts}{suffix}"


def _text(value: str | None) -> str:
    return value if value else MISSING


def row_values(row: ReportRow, mode: ReportMode) -> list[str]:
    """Render a row as CSV cells.  Blank fields become placeholders, never empty cells."""
    if mode == ReportMode.focused:
        return [row.subscriptionId, row.planLabel.value, str(row.owner), row.transferable.value]
    return [
        _text(row.tenantName),
        _text(row.tenantId),
        row.subscriptionId,
        _text(row.subscriptionName),
        _text(row.state),
        _text(row.offerType),
        _text(row.quotaId),
        _text(row.spendingLimit),
        row.planLabel.value,
        _text(row.billingAgreementType),
        "true" if row.isDefault else "false",
        ";".join(row.owners) if row.owners else MISSING_OWNERS,
        str(row.owner),
        row.transferable.value,
    ]


def write_csv(rows: Sequence[ReportRow], path: Path, mode: ReportMode) -> Path:
    """Write the report as CSV.

    The header line is written as-is; every data cell is quoted so that
    commas inside names and guidance text survive.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(",".join(columns_for(mode)) + "\r\n")
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        for row in rows:
            writer.writerow(row_values(row, mode))
    logger.info("CSV report written to %s (%d rows)", path, len(rows))
    return path


def write_json(document: ReportDocument, path: Path) -> Path:
    """Write the JSON document variant of the report."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.model_dump_json(indent=2, exclude_none=True) + "\n", encoding="utf-8")
    logger.info("JSON report written to %s", path)
    return path
