"""Transfer eligibility of a subscription's billing into an Enterprise Agreement.

The table mirrors Azure's published billing-transfer matrix.  It is a
policy constant: when the provider changes the matrix, update the table.
"""

from __future__ import annotations

from az_sub_inventory.models.inventory import PlanLabel, TransferDecision

TRANSFERABLE_TO_EA: frozenset[PlanLabel] = frozenset(
    {
        PlanLabel.ea,
        PlanLabel.ea_dev_test,
        PlanLabel.pay_as_you_go,
    }
)


def is_transferable_to_ea(plan: PlanLabel) -> TransferDecision:
    """Return ``Yes`` when billing for *plan* can move into an EA, else ``No``."""
    return TransferDecision.yes if plan in TRANSFERABLE_TO_EA else TransferDecision.no
