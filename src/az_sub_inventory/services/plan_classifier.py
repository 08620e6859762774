"""Plan classifier – maps subscription commercial signals to a plan label.

The quota ID ARM reports under ``subscriptionPolicies`` is the primary
signal; the offer type, the authorization source and the billing
agreement of the tenant are fallbacks.  Rules are evaluated in order and
the first match wins, because several identifier families overlap
textually (``MSDN_2014-09-01`` vs ``MSDNDevTest_2014-09-01``).

Identifier codes are matched as case-sensitive substrings: ARM suffixes
quota IDs with dates and variants.
"""

from __future__ import annotations

from az_sub_inventory.models.inventory import PlanLabel

# ---------------------------------------------------------------------------
# Identifier tables
# ---------------------------------------------------------------------------

SPONSORSHIP_MARKERS: tuple[str, ...] = ("Sponsored", "CONCIERGE", "Concierge")

MSDN_CODES: tuple[str, ...] = (
    "MSDN_",
    "MS-AZR-0029P",
    "MS-AZR-0059P",
    "MS-AZR-0060P",
    "MS-AZR-0062P",
    "MS-AZR-0063P",
    "VisualStudio",
)

PAYG_QUOTA_ID = "PayAsYouGo_2014-09-01"
PAYG_LEGACY_CODES: tuple[str, ...] = (
    "MS-AZR-0003P",
    "MS-AZR-0017P",
    "MS-AZR-0023P",
    "MSDNDevTest_2014-09-01",
)
PAYG_OFFER_MARKER = "Pay-As-You-Go"

EA_DEV_TEST_CODES: tuple[str, ...] = ("MS-AZR-0145P", "MS-AZR-0148P")
EA_CODES: tuple[str, ...] = (
    "MS-AZR-0033P",
    "MS-AZR-0034P",
    "EnterpriseAgreement_2014-09-01",
)

PARTNER_AUTHORIZATION = "ByPartner"
MCA_AGREEMENT_MARKER = "MicrosoftCustomerAgreement"
MCA_ENTERPRISE_ACCOUNT_TYPE = "Enterprise"


def _contains_any(value: str, codes: tuple[str, ...]) -> bool:
    return any(code in value for code in codes)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify(
    quota_id: str | None,
    offer_type: str | None,
    authorization_source: str | None = "",
    billing_agreement_hint: str | None = "",
    *,
    billing_account_type: str | None = "",
) -> PlanLabel:
    """Return the plan label for one subscription.

    Total: every input, ``None`` and empty strings included, maps to
    exactly one label.

    Order:

    1. sponsorship / concierge marker in the quota ID
    2. partner-delegated authorization (``ByPartner``) – overrides every
       quota and offer match below
    3. MSDN / Visual Studio codes
    4. canonical or legacy Pay-As-You-Go quota IDs
    5. ``Pay-As-You-Go`` in the offer type
    6. EA Dev/Test codes
    7. EA codes
    8. no quota and no offer, MCA billing agreement → MCA
       (``MCAEnterprise`` for enterprise billing accounts)
    9. no quota and no offer → ``Unavailable``
    10. anything else → ``Other``
    """
    quota = quota_id or ""
    offer = offer_type or ""
    auth_source = authorization_source or ""
    hint = billing_agreement_hint or ""

    if _contains_any(quota, SPONSORSHIP_MARKERS):
        return PlanLabel.sponsored_concierge
    if auth_source == PARTNER_AUTHORIZATION:
        return PlanLabel.csp
    if _contains_any(quota, MSDN_CODES):
        return PlanLabel.msdn
    if quota == PAYG_QUOTA_ID or _contains_any(quota, PAYG_LEGACY_CODES):
        return PlanLabel.pay_as_you_go
    if PAYG_OFFER_MARKER in offer:
        return PlanLabel.pay_as_you_go
    if _contains_any(quota, EA_DEV_TEST_CODES):
        return PlanLabel.ea_dev_test
    if _contains_any(quota, EA_CODES):
        return PlanLabel.ea

    if not quota and not offer:
        if MCA_AGREEMENT_MARKER in hint:
            if billing_account_type == MCA_ENTERPRISE_ACCOUNT_TYPE:
                return PlanLabel.mca_enterprise
            return PlanLabel.mca_online
        return PlanLabel.unavailable
    return PlanLabel.other
