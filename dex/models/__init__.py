"""Pydantic models for pool events and state snapshots."""

from dex.models.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swap
from dex.models.snapshot import PoolSnapshot
from dex.models.types import Amount, AssetId, ParticipantId

__all__ = [
    "Amount",
    "AssetId",
    "LiquidityAdded",
    "LiquidityRemoved",
    "ParticipantId",
    "PoolEvent",
    "PoolSnapshot",
    "Swap",
]
