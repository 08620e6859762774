"""ARM request and pagination helpers.

Every call is a single round trip bounded by the configured timeout.
Nothing here retries: failures surface as :class:`AzureApiError` (or a
``requests`` exception for transport errors) and the caller decides how
to degrade.
"""

from __future__ import annotations

import requests

from az_sub_inventory.azure_api._errors import AzureApiError, AzureAuthorizationError

DEFAULT_TIMEOUT = 30
_request_timeout: float = DEFAULT_TIMEOUT


def configure(timeout: float | None = None) -> None:
    """Set the per-request timeout (seconds) used by every helper."""
    global _request_timeout
    _request_timeout = DEFAULT_TIMEOUT if timeout is None else timeout


def _error_message(resp: requests.Response) -> str:
    """Pull the ARM ``error.message`` out of a failed response, if any."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] if resp.text else resp.reason or ""
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return err.get("message") or err.get("code") or ""
    return ""


def _raise_for_status(resp: requests.Response, url: str) -> None:
    if resp.status_code in (401, 403):
        raise AzureAuthorizationError(
            f"Access denied ({resp.status_code}): {_error_message(resp)}",
            status_code=resp.status_code,
            url=url,
        )
    if resp.status_code >= 400:
        raise AzureApiError(
            f"HTTP {resp.status_code}: {_error_message(resp)}",
            status_code=resp.status_code,
            url=url,
        )


def _get_json(url: str, headers: dict[str, str]) -> dict:
    """GET *url* and return the decoded JSON object."""
    resp = requests.get(url, headers=headers, timeout=_request_timeout)
    _raise_for_status(resp, url)
    data = resp.json()
    return data if isinstance(data, dict) else {}


def _post_json(url: str, headers: dict[str, str], payload: dict) -> dict:
    """POST *payload* to *url* and return the decoded JSON object."""
    resp = requests.post(url, headers=headers, json=payload, timeout=_request_timeout)
    _raise_for_status(resp, url)
    data = resp.json()
    return data if isinstance(data, dict) else {}


def _paginate(url: str, headers: dict[str, str]) -> list[dict]:
    """Fetch all pages from an ARM list endpoint and return the merged values."""
    items: list[dict] = []
    while url:
        data = _get_json(url, headers)
        items.extend(data.get("value", []))
        url = data.get("nextLink")
    return items
