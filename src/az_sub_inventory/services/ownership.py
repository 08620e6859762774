"""Ownership resolver – who owns a subscription, or where to find out.

Each plan family has its own lookup chain.  Lookups are single ARM
requests; an empty answer, a 401/403 or a transport failure all degrade
to the next tier and finally to a fixed guidance string.  Nothing here
raises to the caller and nothing is retried.
"""

from __future__ import annotations

import logging

from az_sub_inventory import azure_api
from az_sub_inventory.azure_api.billing import billing_scope
from az_sub_inventory.models.inventory import Guidance, OwnershipRecord, PlanLabel, Resolved
from az_sub_inventory.services._lookup_helpers import NO_BILLING_PROPERTY_STATUSES, attempt

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Guidance
# ---------------------------------------------------------------------------

CLASSIC_GUIDANCE = "Check in Portal – classic subscription"
EA_GUIDANCE = "Check in EA portal – Account Owner"
MCA_GUIDANCE = "Check in Billing (MCA)"
CSP_GUIDANCE = "Managed by partner – CSP"
NOT_AVAILABLE = "Not available"

GUIDANCE: dict[PlanLabel, str] = {
    PlanLabel.msdn: CLASSIC_GUIDANCE,
    PlanLabel.pay_as_you_go: CLASSIC_GUIDANCE,
    PlanLabel.ea: EA_GUIDANCE,
    PlanLabel.ea_dev_test: EA_GUIDANCE,
    PlanLabel.mca_online: MCA_GUIDANCE,
    PlanLabel.mca_enterprise: MCA_GUIDANCE,
    PlanLabel.csp: CSP_GUIDANCE,
    PlanLabel.sponsored_concierge: NOT_AVAILABLE,
    PlanLabel.other: NOT_AVAILABLE,
    PlanLabel.unavailable: NOT_AVAILABLE,
}

CLASSIC_PLANS = frozenset(
    {PlanLabel.msdn, PlanLabel.pay_as_you_go, PlanLabel.ea, PlanLabel.ea_dev_test}
)
MCA_PLANS = frozenset({PlanLabel.mca_online, PlanLabel.mca_enterprise})

ACCOUNT_ADMIN_ROLE = "AccountAdministrator"
BILLING_OWNER_ROLE = "Owner"


def guidance_for(plan: PlanLabel) -> Guidance:
    """Return the fixed guidance record for *plan*."""
    return Guidance(value=GUIDANCE[plan])


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def _is_account_admin(role: str) -> bool:
    # ARM joins combined roles with ";" and older payloads use spaces.
    return any(r.replace(" ", "") == ACCOUNT_ADMIN_ROLE for r in role.split(";"))


def _classic_admin_email(subscription_id: str, tenant_id: str | None) -> str:
    admins = attempt(
        "Classic administrator lookup",
        subscription_id,
        lambda: azure_api.list_classic_administrators(subscription_id, tenant_id),
        [],
    )
    for admin in admins:
        email = (admin.get("email") or "").strip()
        if email and _is_account_admin(admin.get("role") or ""):
            return email
    return ""


def _billing_owner(
    subscription_id: str,
    tenant_id: str | None,
    hierarchy: dict | None,
) -> str:
    if hierarchy is None:
        hierarchy = attempt(
            "Billing hierarchy lookup",
            subscription_id,
            lambda: azure_api.get_billing_hierarchy(subscription_id, tenant_id),
            {},
            expected_statuses=NO_BILLING_PROPERTY_STATUSES,
        )
    scope = billing_scope(hierarchy)
    if scope is None:
        logger.info("No billing hierarchy for %s", subscription_id)
        return ""

    assignments = attempt(
        "Billing role assignment lookup",
        subscription_id,
        lambda: azure_api.list_billing_role_assignments(scope, BILLING_OWNER_ROLE, tenant_id),
        [],
    )
    for a in assignments:
        if (a.get("roleDefinitionName") or "") != BILLING_OWNER_ROLE:
            continue
        email = (a.get("principalEmail") or "").strip()
        identity = email or (a.get("principalName") or "").strip()
        if identity:
            return identity
    return ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_owner(
    subscription_id: str,
    plan: PlanLabel,
    *,
    tenant_id: str | None = None,
    hierarchy: dict | None = None,
) -> OwnershipRecord:
    """Return the owner of *subscription_id*, or guidance when it cannot be found.

    *hierarchy* may carry a billing hierarchy already fetched by the
    caller, saving a second billing lookup for MCA plans.
    """
    if plan in CLASSIC_PLANS:
        email = _classic_admin_email(subscription_id, tenant_id)
        if email:
            return Resolved(value=email)
    elif plan in MCA_PLANS:
        owner = _billing_owner(subscription_id, tenant_id, hierarchy)
        if owner:
            return Resolved(value=owner)
    return guidance_for(plan)
