"""Tenant and subscription discovery."""

from __future__ import annotations

import logging

from az_sub_inventory.azure_api._auth import (
    AZURE_API_VERSION,
    AZURE_MGMT_URL,
    _get_default_tenant_id,
    _get_headers,
)
from az_sub_inventory.azure_api._pagination import _get_json, _paginate

logger = logging.getLogger(__name__)

SUBSCRIPTION_DETAILS_API_VERSION = "2020-01-01"


def list_tenants(tenant_id: str | None = None) -> list[dict]:
    """Return tenants visible to the credential as ``[{"id": ..., "name": ...}, ...]``."""
    headers = _get_headers(tenant_id)
    url = f"{AZURE_MGMT_URL}/tenants?api-version={AZURE_API_VERSION}"
    return [
        {"id": t["tenantId"], "name": t.get("displayName") or ""}
        for t in _paginate(url, headers)
        if t.get("tenantId")
    ]


def get_tenant_name(tenant_id: str | None = None) -> str:
    """Return the display name of *tenant_id*.

    Without *tenant_id* the credential's own tenant is used, then the
    first visible tenant.  Returns an empty string when no tenant is
    visible.
    """
    tenants = list_tenants(tenant_id)
    tenant_id = tenant_id or _get_default_tenant_id()
    for t in tenants:
        if tenant_id and t["id"] == tenant_id:
            return t["name"]
    return tenants[0]["name"] if tenants else ""


def list_subscriptions(tenant_id: str | None = None) -> list[dict]:
    """Return every visible subscription, whatever its state.

    Each entry has the shape::

        {"subscriptionId": ..., "displayName": ..., "tenantId": ...,
         "state": ..., "authorizationSource": ...,
         "quotaId": ..., "spendingLimit": ...}

    Order is the order ARM returns them in.
    """
    headers = _get_headers(tenant_id)
    url = f"{AZURE_MGMT_URL}/subscriptions?api-version={AZURE_API_VERSION}"
    subs: list[dict] = []
    for s in _paginate(url, headers):
        policies = s.get("subscriptionPolicies") or {}
        subs.append(
            {
                "subscriptionId": s.get("subscriptionId") or "",
                "displayName": s.get("displayName") or "",
                "tenantId": s.get("tenantId") or "",
                "state": s.get("state") or "",
                "offerType": s.get("offerType") or "",
                "authorizationSource": s.get("authorizationSource") or "",
                "quotaId": policies.get("quotaId") or "",
                "spendingLimit": policies.get("spendingLimit") or "",
            }
        )
    return subs


def get_subscription_details(subscription_id: str, tenant_id: str | None = None) -> dict:
    """Return ``{"quotaId", "spendingLimit", "authorizationSource"}`` for a subscription.

    Missing fields come back as empty strings.  Raises
    :class:`AzureAuthorizationError` when the caller cannot read the
    subscription.
    """
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}"
        f"?api-version={SUBSCRIPTION_DETAILS_API_VERSION}"
    )
    data = _get_json(url, headers)
    policies = data.get("subscriptionPolicies") or {}
    return {
        "quotaId": policies.get("quotaId") or "",
        "spendingLimit": policies.get("spendingLimit") or "",
        "authorizationSource": data.get("authorizationSource") or "",
    }
