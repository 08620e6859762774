"""Report assembler – one classified, owner-resolved row per subscription.

Subscriptions are processed sequentially, in input order.  Each row is
built in isolation: a lookup that fails degrades a single field, and a
row that fails outright is replaced by a degraded row, so one
subscription can never abort or corrupt another.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from az_sub_inventory import azure_api
from az_sub_inventory.models.inventory import (
    MISSING,
    MISSING_OWNERS,
    MULTIPLE_AGREEMENTS,
    PlanLabel,
    ReportMode,
    ReportRow,
    Subscription,
)
from az_sub_inventory.services._lookup_helpers import NO_BILLING_PROPERTY_STATUSES, attempt
from az_sub_inventory.services.ownership import guidance_for, resolve_owner
from az_sub_inventory.services.plan_classifier import classify
from az_sub_inventory.services.transfer import is_transferable_to_ea

logger = logging.getLogger(__name__)

SUBSCRIPTION_OWNER_ROLE = "Owner"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def tenant_billing_hint(billing_accounts: Sequence[dict]) -> str:
    """Summarize tenant billing accounts into one agreement-type hint.

    No account → ``MISSING``; one → its ``agreementType``; several →
    ``Multiple/Unknown``.
    """
    if not billing_accounts:
        return MISSING
    if len(billing_accounts) > 1:
        return MULTIPLE_AGREEMENTS
    acct = billing_accounts[0]
    return (
        acct.get("agreementType")
        or (acct.get("properties") or {}).get("agreementType")
        or MISSING
    )


def to_subscription(raw: dict, profile: dict[str, dict] | None = None) -> Subscription:
    """Build a :class:`Subscription` from a ``list_subscriptions`` entry.

    *profile* (from :func:`azure_api.load_cli_profile`) supplies the
    default flag and, where ARM has none, the offer type.
    """
    extra = (profile or {}).get(raw.get("subscriptionId") or "", {})
    return Subscription(
        **{
            **raw,
            "offerType": raw.get("offerType") or extra.get("offerType") or "",
            "isDefault": bool(extra.get("isDefault")),
        }
    )


def _format_owner(assignment: dict) -> str:
    name = assignment.get("principalName") or "-"
    kind = assignment.get("principalType") or "-"
    return f"{name}({kind})"


def _degraded_row(sub: Subscription, mode: ReportMode) -> ReportRow:
    plan = PlanLabel.unavailable
    row = ReportRow(
        subscriptionId=sub.subscriptionId or MISSING,
        planLabel=plan,
        owner=guidance_for(plan),
        transferable=is_transferable_to_ea(plan),
    )
    if mode == ReportMode.extended:
        row = row.model_copy(
            update={
                "subscriptionName": sub.displayName,
                "tenantId": sub.tenantId,
                "state": sub.state,
                "isDefault": sub.isDefault,
                "owners": (MISSING_OWNERS,),
            }
        )
    return row


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_row(
    sub: Subscription,
    *,
    mode: ReportMode = ReportMode.focused,
    tenant_hint: str = "",
    tenant_name: str = "",
    tenant_id: str | None = None,
) -> ReportRow:
    """Classify one subscription, resolve its owner and decide transferability."""
    sub_id = sub.subscriptionId
    if sub.known_state is None:
        logger.debug("Subscription %s has unrecognized state %r", sub_id, sub.state)

    details = attempt(
        "Subscription details lookup",
        sub_id,
        lambda: azure_api.get_subscription_details(sub_id, tenant_id),
        {},
    )
    quota_id = details.get("quotaId") or sub.quotaId
    auth_source = details.get("authorizationSource") or sub.authorizationSource
    spending_limit = details.get("spendingLimit") or sub.spendingLimit

    # The billing hierarchy is only needed when quota and offer say nothing,
    # or for the extended columns.
    hierarchy: dict | None = None
    if (not quota_id and not sub.offerType) or mode == ReportMode.extended:
        hierarchy = attempt(
            "Billing hierarchy lookup",
            sub_id,
            lambda: azure_api.get_billing_hierarchy(sub_id, tenant_id),
            {},
            expected_statuses=NO_BILLING_PROPERTY_STATUSES,
        )

    agreement = (hierarchy or {}).get("agreementType") or tenant_hint
    plan = classify(
        quota_id,
        sub.offerType,
        auth_source,
        agreement,
        billing_account_type=(hierarchy or {}).get("accountType") or "",
    )
    owner = resolve_owner(sub_id, plan, tenant_id=tenant_id, hierarchy=hierarchy)
    row = ReportRow(
        subscriptionId=sub_id,
        planLabel=plan,
        owner=owner,
        transferable=is_transferable_to_ea(plan),
    )
    if mode == ReportMode.focused:
        return row

    assignments = attempt(
        "Subscription owner lookup",
        sub_id,
        lambda: azure_api.list_role_assignments(
            f"/subscriptions/{sub_id}", SUBSCRIPTION_OWNER_ROLE, tenant_id
        ),
        [],
    )
    return row.model_copy(
        update={
            "tenantName": tenant_name,
            "tenantId": sub.tenantId,
            "subscriptionName": sub.displayName,
            "state": sub.state,
            "offerType": sub.offerType,
            "quotaId": quota_id,
            "spendingLimit": spending_limit,
            "billingAgreementType": agreement,
            "isDefault": sub.isDefault,
            "owners": tuple(_format_owner(a) for a in assignments) or (MISSING_OWNERS,),
        }
    )


def build_report(
    subscriptions: Sequence[Subscription],
    *,
    mode: ReportMode = ReportMode.focused,
    tenant_hint: str = "",
    tenant_name: str = "",
    tenant_id: str | None = None,
) -> list[ReportRow]:
    """Return one row per subscription, in input order.

    A subscription whose row cannot be built at all still gets a row
    (``Unavailable`` / ``Not available`` / ``No``).
    """
    rows: list[ReportRow] = []
    total = len(subscriptions)
    for i, sub in enumerate(subscriptions, start=1):
        logger.info("[%d/%d] Processing subscription: %s", i, total, sub.subscriptionId)
        if not sub.subscriptionId:
            logger.warning("Entry %d/%d has no subscription ID", i, total)
            rows.append(_degraded_row(sub, mode))
            continue
        try:
            row = build_row(
                sub,
                mode=mode,
                tenant_hint=tenant_hint,
                tenant_name=tenant_name,
                tenant_id=tenant_id,
            )
        except Exception:
            logger.exception("Failed to build report row for %s", sub.subscriptionId)
            row = _degraded_row(sub, mode)
        rows.append(row)
    return rows
