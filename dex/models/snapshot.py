"""Point-in-time view of a pool's accounting state."""

from pydantic import BaseModel, ConfigDict, Field

from dex.models.types import Amount, AssetId, ParticipantId


class PoolSnapshot(BaseModel):
    """Reserves, share supply and per-participant share balances.

    Participants with a zero balance are not listed.
    """

    model_config = ConfigDict(frozen=True)

    asset_a: AssetId
    asset_b: AssetId
    reserve_a: Amount
    reserve_b: Amount
    total_shares: Amount
    shares: dict[ParticipantId, Amount] = Field(default_factory=dict)

    @property
    def k(self) -> int:
        """Constant product reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0
