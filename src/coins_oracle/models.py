"""Canonical data shapes returned by every client.

Whatever protocol a node speaks, clients translate its answers into
these models. The API renders them with ``to_dict()``, which uses the
wire field names and leaves out optional fields that are not set.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def decimal_string(value: Decimal) -> str:
    """Render a decimal amount as a plain (non-exponent) string."""
    if value == 0:
        return "0"
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class CanonicalModel(BaseModel):
    """Base for models exposed to API callers."""

    def to_dict(self) -> dict:
        """Convert to the JSON-ready wire representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChainState(CanonicalModel):
    """Snapshot of a node's sync position."""

    chain_name: str = Field(..., serialization_alias="chain", description="Network name")
    block_height: int = Field(..., description="Height of the current head")
    current_block_hash: str = Field(..., description="Hash of the current head")


class AssetBalance(CanonicalModel):
    """Balance of one asset held by an address."""

    asset_symbol: str = Field(..., serialization_alias="asset", description="Asset symbol")
    balance: str = Field(..., description="Balance as a decimal string")


class Balance(CanonicalModel):
    """All balances held by an address, in the order the node reports them."""

    assets: list[AssetBalance] = Field(default_factory=list)


class ConfirmationInfo(CanonicalModel):
    """How final a transaction is.

    When ``threshold`` is set, ``confirmed`` must equal
    ``observed_confirmations >= threshold``. When it is not set the
    chain has no notion of confirmation depth and ``confirmed`` is the
    node's own finality signal.
    """

    threshold: Optional[int] = Field(None, description="Confirmations required")
    confirmed: bool = Field(..., description="Whether the transaction is final")
    observed_confirmations: Optional[int] = Field(
        None, serialization_alias="value", description="Confirmations seen so far"
    )

    @model_validator(mode="after")
    def _check_threshold(self) -> "ConfirmationInfo":
        if self.threshold is None:
            return self
        if self.observed_confirmations is None:
            raise ValueError("observed_confirmations is required when threshold is set")
        if self.confirmed != (self.observed_confirmations >= self.threshold):
            raise ValueError(
                f"confirmed={self.confirmed} contradicts "
                f"{self.observed_confirmations}/{self.threshold} confirmations"
            )
        return self


class Transaction(CanonicalModel):
    """A transfer recorded on a ledger."""

    id: str = Field(..., description="Transaction hash or ledger id")
    from_address: str = Field(..., serialization_alias="from", description="Sender")
    to_address: str = Field(..., serialization_alias="to", description="Recipient")
    value: str = Field(..., description="Transferred amount as a decimal string")
    confirmation: ConfirmationInfo = Field(..., serialization_alias="confirmations")


class RegisteredNode(CanonicalModel):
    """One registry entry as reported by a node listing."""

    asset_id: str = Field(..., serialization_alias="assetId", description="Registry key")
    running: bool = Field(default=True, description="Always true for registered clients")
    info: Optional[ChainState] = Field(None, description="Live chain state, if fetched")
