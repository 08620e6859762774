"""Shared Azure REST helpers.

Provides pure-data functions the report assembler calls.  Every public
function returns plain Python objects (dicts / lists) and raises on
failure; deciding how to degrade is left to the caller.

This package re-exports all public names so that
``from az_sub_inventory.azure_api import X`` and
``from az_sub_inventory import azure_api`` both work, and so that the
module itself can be handed to the assembler as its API collaborator.
"""

import requests as requests  # noqa: F401  # re-export for mock patching

# -- Auth & constants -------------------------------------------------------
from az_sub_inventory.azure_api._auth import (  # noqa: F401
    AZURE_API_VERSION,
    AZURE_MGMT_URL,
    GRAPH_URL,
    _get_default_tenant_id,
    _get_headers,
    credential,
)

# -- Errors ------------------------------------------------------------------
from az_sub_inventory.azure_api._errors import (  # noqa: F401
    AzureApiError,
    AzureAuthorizationError,
)

# -- Requests & pagination ---------------------------------------------------
from az_sub_inventory.azure_api._pagination import (  # noqa: F401
    _get_json,
    _paginate,
    _post_json,
    configure,
)

# -- CLI profile -------------------------------------------------------------
from az_sub_inventory.azure_api._profile import load_cli_profile  # noqa: F401

# -- Authorization -----------------------------------------------------------
from az_sub_inventory.azure_api.authorization import (  # noqa: F401
    list_classic_administrators,
    list_role_assignments,
)

# -- Billing -----------------------------------------------------------------
from az_sub_inventory.azure_api.billing import (  # noqa: F401
    billing_scope,
    get_billing_hierarchy,
    list_billing_accounts,
    list_billing_role_assignments,
)

# -- Discovery ---------------------------------------------------------------
from az_sub_inventory.azure_api.discovery import (  # noqa: F401
    get_subscription_details,
    get_tenant_name,
    list_subscriptions,
    list_tenants,
)
