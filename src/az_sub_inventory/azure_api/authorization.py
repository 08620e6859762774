"""Classic administrator and RBAC role assignment lookups."""

from __future__ import annotations

import logging
from urllib.parse import quote

from az_sub_inventory.azure_api._auth import AZURE_MGMT_URL, GRAPH_URL, _get_headers
from az_sub_inventory.azure_api._pagination import _paginate, _post_json

logger = logging.getLogger(__name__)

CLASSIC_ADMIN_API_VERSION = "2015-06-01"
AUTHORIZATION_API_VERSION = "2022-04-01"

# Graph getByIds accepts at most 1000 ids per call.
_GRAPH_BATCH = 1000


def _last_segment(resource_id: str) -> str:
    return resource_id.rstrip("/").rsplit("/", 1)[-1].lower()


def list_classic_administrators(
    subscription_id: str,
    tenant_id: str | None = None,
) -> list[dict]:
    """Return classic administrators as ``[{"role": ..., "email": ...}, ...]``.

    ``role`` is the raw ARM value, which may combine several roles
    separated by ``;`` (e.g. ``"ServiceAdministrator;AccountAdministrator"``).
    """
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}/providers/"
        f"Microsoft.Authorization/classicAdministrators"
        f"?api-version={CLASSIC_ADMIN_API_VERSION}"
    )
    admins: list[dict] = []
    for item in _paginate(url, headers):
        props = item.get("properties") or {}
        admins.append(
            {
                "role": props.get("role") or "",
                "email": props.get("emailAddress") or "",
            }
        )
    return admins


def _role_definition_ids(scope: str, role_name: str, headers: dict[str, str]) -> set[str]:
    role_filter = quote(f"roleName eq '{role_name}'")
    url = (
        f"{AZURE_MGMT_URL}{scope}/providers/Microsoft.Authorization/roleDefinitions"
        f"?$filter={role_filter}&api-version={AUTHORIZATION_API_VERSION}"
    )
    return {
        _last_segment(d.get("id") or d.get("name") or "")
        for d in _paginate(url, headers)
        if (d.get("properties") or {}).get("roleName") == role_name
    }


def _resolve_principals(principal_ids: list[str], tenant_id: str | None) -> dict[str, dict]:
    """Map principal object IDs to Graph directory objects.

    Graph access is optional: on any failure the mapping is simply
    incomplete and callers fall back to the raw object ID.
    """
    resolved: dict[str, dict] = {}
    if not principal_ids:
        return resolved
    try:
        headers = _get_headers(tenant_id, resource=GRAPH_URL)
        url = f"{GRAPH_URL}/v1.0/directoryObjects/getByIds"
        for start in range(0, len(principal_ids), _GRAPH_BATCH):
            batch = principal_ids[start : start + _GRAPH_BATCH]
            data = _post_json(url, headers, {"ids": batch})
            for obj in data.get("value", []):
                if obj.get("id"):
                    resolved[obj["id"]] = obj
    except Exception:
        logger.warning("Could not resolve principal names via Microsoft Graph", exc_info=True)
    return resolved


def list_role_assignments(
    scope: str,
    role_name: str = "Owner",
    tenant_id: str | None = None,
) -> list[dict]:
    """Return RBAC assignments of *role_name* at *scope*, inherited ones included.

    Each entry has the shape::

        {"principalName": ..., "principalEmail": ..., "principalType": ...,
         "roleDefinitionName": ...}

    ``principalName`` falls back to the object ID when Graph cannot
    resolve the principal.
    """
    headers = _get_headers(tenant_id)
    role_ids = _role_definition_ids(scope, role_name, headers)
    if not role_ids:
        return []

    url = (
        f"{AZURE_MGMT_URL}{scope}/providers/Microsoft.Authorization/roleAssignments"
        f"?$filter=atScope()&api-version={AUTHORIZATION_API_VERSION}"
    )
    matching = [
        a.get("properties") or {}
        for a in _paginate(url, headers)
        if _last_segment((a.get("properties") or {}).get("roleDefinitionId") or "") in role_ids
    ]

    principal_ids = sorted({p["principalId"] for p in matching if p.get("principalId")})
    directory = _resolve_principals(principal_ids, tenant_id)

    assignments: list[dict] = []
    for props in matching:
        principal_id = props.get("principalId") or ""
        obj = directory.get(principal_id, {})
        assignments.append(
            {
                "principalName": (
                    obj.get("userPrincipalName")
                    or obj.get("displayName")
                    or obj.get("appId")
                    or principal_id
                ),
                "principalEmail": obj.get("mail") or "",
                "principalType": props.get("principalType") or "",
                "roleDefinitionName": role_name,
            }
        )
    return assignments
