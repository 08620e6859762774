"""Microsoft.Billing lookups: accounts, subscription hierarchy, billing roles."""

from __future__ import annotations

import logging

from az_sub_inventory.azure_api._auth import AZURE_MGMT_URL, _get_headers
from az_sub_inventory.azure_api._pagination import _get_json, _paginate

logger = logging.getLogger(__name__)

BILLING_API_VERSION = "2020-05-01"
BILLING_PROPERTY_API_VERSION = "2024-04-01"
BILLING_ROLES_API_VERSION = "2024-04-01"

_BILLING_PREFIX = "/providers/Microsoft.Billing/billingAccounts"


def _name_of(value: str) -> str:
    return value.rstrip("/").rsplit("/", 1)[-1] if value else ""


def list_billing_accounts(tenant_id: str | None = None) -> list[dict]:
    """Return billing accounts visible to the caller, as raw ARM objects.

    The raw objects are kept for the JSON report; each one is given a
    top-level ``agreementType`` copied from its properties.
    """
    headers = _get_headers(tenant_id)
    url = f"{AZURE_MGMT_URL}{_BILLING_PREFIX}?api-version={BILLING_API_VERSION}"
    accounts = _paginate(url, headers)
    for acct in accounts:
        props = acct.get("properties") or {}
        acct.setdefault("agreementType", props.get("agreementType") or "")
    return accounts


def get_billing_hierarchy(subscription_id: str, tenant_id: str | None = None) -> dict:
    """Return the billing placement of a subscription.

    Shape::

        {"billingAccountId": ..., "billingProfileId": ...,
         "invoiceSectionId": ..., "agreementType": ..., "accountType": ...}

    Each value is an empty string when the provider does not expose it
    (e.g. classic or partner subscriptions).
    """
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}/providers/"
        f"Microsoft.Billing/billingProperty/default"
        f"?api-version={BILLING_PROPERTY_API_VERSION}"
    )
    props = _get_json(url, headers).get("properties") or {}
    return {
        "billingAccountId": _name_of(props.get("billingAccountId") or ""),
        "billingProfileId": _name_of(props.get("billingProfileId") or ""),
        "invoiceSectionId": _name_of(props.get("invoiceSectionId") or ""),
        "agreementType": props.get("billingAccountAgreementType") or "",
        "accountType": props.get("billingAccountType") or "",
    }


def billing_scope(hierarchy: dict) -> str | None:
    """Return the most specific billing scope the hierarchy resolves to.

    Account → profile → invoice section; a level is only used when every
    level above it is known.  Returns ``None`` without an account.
    """
    account = hierarchy.get("billingAccountId")
    profile = hierarchy.get("billingProfileId")
    section = hierarchy.get("invoiceSectionId")
    if not account:
        return None
    scope = f"{_BILLING_PREFIX}/{account}"
    if profile:
        scope += f"/billingProfiles/{profile}"
        if section:
            scope += f"/invoiceSections/{section}"
    return scope


def list_billing_role_assignments(
    scope: str,
    role_name: str = "Owner",
    tenant_id: str | None = None,
) -> list[dict]:
    """Return billing role assignments of *role_name* at *scope*.

    Each entry has the shape::

        {"principalName": ..., "principalEmail": ..., "roleDefinitionName": ...}
    """
    headers = _get_headers(tenant_id)
    defs_url = (
        f"{AZURE_MGMT_URL}{scope}/billingRoleDefinitions"
        f"?api-version={BILLING_ROLES_API_VERSION}"
    )
    role_ids = {
        _name_of(d.get("id") or d.get("name") or "").lower()
        for d in _paginate(defs_url, headers)
        if (d.get("properties") or {}).get("roleName") == role_name
    }
    if not role_ids:
        return []

    url = f"{AZURE_MGMT_URL}{scope}/billingRoleAssignments?api-version={BILLING_ROLES_API_VERSION}"
    assignments: list[dict] = []
    for a in _paginate(url, headers):
        props = a.get("properties") or {}
        if _name_of(props.get("roleDefinitionId") or "").lower() not in role_ids:
            continue
        assignments.append(
            {
                "principalName": (
                    props.get("principalUserPrincipalName")
                    or props.get("principalDisplayName")
                    or props.get("principalId")
                    or ""
                ),
                "principalEmail": props.get("userEmailAddress") or "",
                "roleDefinitionName": role_name,
            }
        )
    return assignments
