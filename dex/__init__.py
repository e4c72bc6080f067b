"""Two-asset constant product liquidity pool."""

from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.custody import AssetCustody, LedgerCustody, TokenLedger
from dex.errors import (
    EmptyPool,
    InsufficientShares,
    InvalidAmount,
    InvariantViolation,
    PoolError,
    ReserveOverflow,
    RollbackError,
    TransferError,
    ZeroMintedShares,
    ZeroOutput,
)
from dex.events import EventLog, EventSink
from dex.pool import Pool

__all__ = [
    "DEFAULT_POOL_CONFIG",
    "AssetCustody",
    "EmptyPool",
    "EventLog",
    "EventSink",
    "InsufficientShares",
    "InvalidAmount",
    "InvariantViolation",
    "LedgerCustody",
    "Pool",
    "PoolConfig",
    "PoolError",
    "ReserveOverflow",
    "RollbackError",
    "TokenLedger",
    "TransferError",
    "ZeroMintedShares",
    "ZeroOutput",
]
