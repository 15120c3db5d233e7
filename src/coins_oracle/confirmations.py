"""Confirmation model shared by every client.

Chains with probabilistic finality are judged by confirmation depth
against a threshold. Ledgers with no depth concept (a record is either
in the closed ledger or it is not) are final as soon as the record can
be retrieved.
"""

from typing import Optional

from coins_oracle.models import ConfirmationInfo

DEFAULT_CONFIRMATION_THRESHOLD = 5


def by_depth(observed: int, threshold: int = DEFAULT_CONFIRMATION_THRESHOLD) -> ConfirmationInfo:
    """Build confirmation info from a confirmation counter reported by the node."""
    observed = int(observed)
    return ConfirmationInfo(
        threshold=threshold,
        confirmed=observed >= threshold,
        observed_confirmations=observed,
    )


def by_height(
    current_height: int,
    tx_height: Optional[int],
    threshold: int = DEFAULT_CONFIRMATION_THRESHOLD,
) -> ConfirmationInfo:
    """Build confirmation info from the chain head and the transaction's block.

    A transaction not yet in a block (``tx_height`` is None) has zero
    confirmations.
    """
    if tx_height is None:
        return by_depth(0, threshold)
    return by_depth(max(0, current_height - tx_height), threshold)


def finalized() -> ConfirmationInfo:
    """Confirmation info for ledgers where a retrievable record is final."""
    return ConfirmationInfo(confirmed=True)
