"""Pydantic models for records the pool emits after each committed mutation."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from dex.models.types import Amount, AssetId, ParticipantId


class LiquidityAdded(BaseModel):
    """A provider deposited both assets and received shares."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: ParticipantId
    amount_a: Amount
    amount_b: Amount
    shares_minted: Amount


class LiquidityRemoved(BaseModel):
    """A provider burned shares and withdrew both assets."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: ParticipantId
    amount_a: Amount
    amount_b: Amount
    shares_burned: Amount


class Swap(BaseModel):
    """A trader exchanged one asset for the other."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["swap"] = "swap"
    trader: ParticipantId
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount


# Discriminated union: pydantic uses the 'kind' field to pick the record type
PoolEvent = Annotated[
    LiquidityAdded | LiquidityRemoved | Swap,
    Field(discriminator="kind"),
]
