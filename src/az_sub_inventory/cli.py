"""Unified CLI for az-sub-inventory.

Provides two subcommands:
    az-sub-inventory report    – inventory every visible subscription
    az-sub-inventory classify  – classify one set of plan signals offline

Running ``az-sub-inventory`` without a subcommand defaults to ``report``.
"""

from __future__ import annotations

import logging
import socket
from datetime import datetime
from pathlib import Path

import click

from az_sub_inventory import __version__, azure_api
from az_sub_inventory.export import (
    FOCUSED_COLUMNS,
    row_values,
    timestamped_path,
    write_csv,
    write_json,
)
from az_sub_inventory.models.inventory import MISSING, ReportDocument, ReportMode, ReportRow
from az_sub_inventory.services.ownership import guidance_for
from az_sub_inventory.services.plan_classifier import classify as classify_plan
from az_sub_inventory.services.report_builder import (
    build_report,
    tenant_billing_hint,
    to_subscription,
)
from az_sub_inventory.services.transfer import is_transferable_to_ea
from az_sub_inventory.settings import InventorySettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Colored logging (reuse uvicorn's formatter)
# ---------------------------------------------------------------------------


def _setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root ``az_sub_inventory`` logger with uvicorn-style colours."""
    from uvicorn.logging import DefaultFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(
        DefaultFormatter(fmt="%(levelprefix)s %(name)s - %(message)s", use_colors=True)
    )
    app_logger = logging.getLogger("az_sub_inventory")
    app_logger.handlers = [handler]
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Silence noisy third-party loggers
    logging.getLogger("azure").setLevel(logging.WARNING)


def _echo_table(rows: list[ReportRow]) -> None:
    """Print the focused columns as an aligned table."""
    cells = [row_values(r, ReportMode.focused) for r in rows]
    widths = [
        max([len(h)] + [len(c[i]) for c in cells]) for i, h in enumerate(FOCUSED_COLUMNS)
    ]
    header = "  ".join(h.ljust(w) for h, w in zip(FOCUSED_COLUMNS, widths, strict=True))
    click.echo(click.style(header, bold=True))
    click.echo("  ".join("-" * w for w in widths))
    for c in cells:
        click.echo("  ".join(v.ljust(w) for v, w in zip(c, widths, strict=True)))


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="az-sub-inventory")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Azure subscription inventory."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(report)


@cli.command()
@click.option("--tenant-id", default=None, help="Tenant to query (default: credential's tenant).")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ReportMode]),
    default=None,
    help="Report column set.  [default: focused]",
)
@click.option(
    "--json/--no-json",
    "with_json",
    default=None,
    help="Also write the JSON document.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the output files.  [default: .]",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging.",
)
def report(
    tenant_id: str | None,
    mode: str | None,
    with_json: bool | None,
    output_dir: Path | None,
    verbose: bool,
) -> None:
    """Inventory subscriptions: plan type, owner and EA transferability."""
    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)

    settings = InventorySettings()
    tenant_id = tenant_id or settings.tenant_id or None
    report_mode = ReportMode(mode) if mode else settings.mode
    with_json = settings.write_json if with_json is None else with_json
    output_dir = output_dir or settings.output_dir
    azure_api.configure(timeout=settings.request_timeout)

    click.echo(click.style("== Azure Environment Discovery ==", bold=True))

    listing_failed = False
    try:
        raw_subs = azure_api.list_subscriptions(tenant_id)
    except Exception as exc:
        logger.error("Could not list subscriptions: %s", exc)
        logger.debug("Subscription listing failure", exc_info=True)
        raw_subs = []
        listing_failed = True

    try:
        profile = azure_api.load_cli_profile()
    except Exception as exc:
        logger.warning("Could not read Azure CLI profile: %s", exc)
        profile = {}
    subscriptions = [to_subscription(s, profile) for s in raw_subs]

    click.echo("Collecting billing accounts (EA/MCA/PAYG hint)...")
    try:
        billing_accounts = azure_api.list_billing_accounts(tenant_id)
    except Exception as exc:
        logger.warning("Could not list billing accounts: %s", exc)
        billing_accounts = []
    hint = tenant_billing_hint(billing_accounts)

    tenant_name = ""
    if report_mode == ReportMode.extended:
        try:
            tenant_name = azure_api.get_tenant_name(tenant_id) or MISSING
        except Exception as exc:
            logger.warning("Could not read tenant name: %s", exc)
            tenant_name = MISSING

    click.echo(f"Enumerating {len(subscriptions)} subscriptions...")
    rows = build_report(
        subscriptions,
        mode=report_mode,
        tenant_hint=hint,
        tenant_name=tenant_name,
        tenant_id=tenant_id,
    )

    now = datetime.now().astimezone()
    csv_path = write_csv(
        rows, timestamped_path(output_dir, settings.file_prefix, ".csv", now), report_mode
    )
    json_path = None
    if with_json:
        document = ReportDocument(
            generatedAt=now,
            host=socket.gethostname(),
            overallAgreementType=hint,
            billingAccounts=billing_accounts,
            subscriptions=rows,
        )
        json_path = write_json(
            document, timestamped_path(output_dir, settings.file_prefix, ".json", now)
        )

    click.echo()
    _echo_table(rows)
    click.echo()
    click.echo("Done.")
    click.echo(f"CSV:     {click.style(str(csv_path), fg='cyan')}")
    if json_path is not None:
        click.echo(f"JSON:    {click.style(str(json_path), fg='cyan')}")

    if listing_failed:
        raise click.exceptions.Exit(1)


@cli.command()
@click.option("--quota-id", default="", help="Quota ID from subscriptionPolicies.")
@click.option("--offer-type", default="", help="Offer type, if known.")
@click.option("--authorization-source", default="", help="e.g. ByPartner.")
@click.option("--hint", default="", help="Billing agreement type, e.g. MicrosoftCustomerAgreement.")
@click.option("--account-type", default="", help="Billing account type, e.g. Enterprise.")
def classify(
    quota_id: str,
    offer_type: str,
    authorization_source: str,
    hint: str,
    account_type: str,
) -> None:
    """Classify one set of plan signals without calling Azure."""
    plan = classify_plan(
        quota_id, offer_type, authorization_source, hint, billing_account_type=account_type
    )
    click.echo(f"Sub. Type:               {plan.value}")
    click.echo(f"Transferable (Internal): {is_transferable_to_ea(plan).value}")
    click.echo(f"Owner guidance:          {guidance_for(plan)}")
