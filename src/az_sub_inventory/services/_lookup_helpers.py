"""Shared helper for lookups that degrade instead of raising."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from typing import TypeVar

from az_sub_inventory.azure_api._errors import AzureApiError, AzureAuthorizationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Billing property answers these for classic, EA and CSP subscriptions.
NO_BILLING_PROPERTY_STATUSES = frozenset({400, 404})


def attempt(
    what: str,
    subscription_id: str,
    fn: Callable[[], T],
    default: T,
    *,
    expected_statuses: Collection[int] = (),
) -> T:
    """Run one lookup; log and return *default* on any failure.

    Authorization gaps and transport or service failures are treated
    alike: the caller only ever sees *default*.  HTTP errors whose status
    is in *expected_statuses* mean "no data here" and are logged at DEBUG.
    """
    try:
        return fn()
    except AzureAuthorizationError:
        logger.warning("%s: access denied for %s", what, subscription_id)
    except AzureApiError as exc:
        if exc.status_code in expected_statuses:
            logger.debug("%s: nothing for %s (HTTP %s)", what, subscription_id, exc.status_code)
        else:
            logger.warning("%s failed for %s: %s", what, subscription_id, exc)
    except Exception as exc:
        logger.warning("%s failed for %s: %s", what, subscription_id, exc)
        logger.debug("%s failure detail", what, exc_info=True)
    return default
