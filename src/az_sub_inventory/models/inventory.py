"""Pydantic models for the subscription inventory report.

Field names follow the ARM / report JSON casing so that models can be
built straight from API payloads and dumped straight into the JSON
document.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MISSING = "MISSING"
MISSING_OWNERS = "(Missing)"
MULTIPLE_AGREEMENTS = "Multiple/Unknown"

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SubscriptionState(StrEnum):
    """Known ARM subscription states.  Other values pass through as plain strings."""

    enabled = "Enabled"
    disabled = "Disabled"
    warned = "Warned"
    deleted = "Deleted"
    past_due = "PastDue"
    unregistered = "Unregistered"


class PlanLabel(StrEnum):
    """Commercial plan a subscription is billed under."""

    msdn = "MSDN"
    pay_as_you_go = "PayAsYouGo"
    ea = "EA"
    ea_dev_test = "EADevTest"
    sponsored_concierge = "SponsoredConcierge"
    mca_online = "MCAOnline"
    mca_enterprise = "MCAEnterprise"
    csp = "CSP"
    other = "Other"
    unavailable = "Unavailable"


class TransferDecision(StrEnum):
    yes = "Yes"
    no = "No"


class ReportMode(StrEnum):
    """Column set of the CSV report."""

    focused = "focused"
    extended = "extended"


# ---------------------------------------------------------------------------
# Input view
# ---------------------------------------------------------------------------


class Subscription(BaseModel):
    """Read-only view of a subscription as listed by ARM."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    subscriptionId: str
    displayName: str = ""
    tenantId: str = ""
    state: str = ""
    offerType: str = ""
    quotaId: str = ""
    authorizationSource: str = ""
    spendingLimit: str = ""
    isDefault: bool = False

    @field_validator(
        "displayName",
        "tenantId",
        "state",
        "offerType",
        "quotaId",
        "authorizationSource",
        "spendingLimit",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def known_state(self) -> SubscriptionState | None:
        """The state as a :class:`SubscriptionState`, or ``None`` if unrecognized."""
        try:
            return SubscriptionState(self.state)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


class Resolved(BaseModel):
    """An owner identity (email or principal name) found by a lookup."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["resolved"] = "resolved"
    value: str = Field(min_length=1)

    def __str__(self) -> str:
        return self.value


class Guidance(BaseModel):
    """Fixed text telling the operator where to look for the owner."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["guidance"] = "guidance"
    value: str = Field(min_length=1)

    def __str__(self) -> str:
        return self.value


OwnershipRecord = Annotated[Resolved | Guidance, Field(discriminator="kind")]

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class ReportRow(BaseModel):
    """One report line.  The extended fields stay ``None`` in focused mode."""

    model_config = ConfigDict(frozen=True)

    subscriptionId: str
    planLabel: PlanLabel
    owner: OwnershipRecord
    transferable: TransferDecision

    tenantName: str | None = None
    tenantId: str | None = None
    subscriptionName: str | None = None
    state: str | None = None
    offerType: str | None = None
    quotaId: str | None = None
    spendingLimit: str | None = None
    billingAgreementType: str | None = None
    isDefault: bool | None = None
    owners: tuple[str, ...] | None = None


class ReportDocument(BaseModel):
    """JSON variant of the report, with run metadata."""

    generatedAt: datetime
    host: str
    overallAgreementType: str
    billingAccounts: list[dict[str, Any]] = Field(default_factory=list)
    subscriptions: list[ReportRow] = Field(default_factory=list)
