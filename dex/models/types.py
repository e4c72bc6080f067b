"""Shared type definitions for pool models."""

from typing import Annotated

from pydantic import Field

from dex.constants import UINT256_MAX

# Non-negative token or share amount that fits in a uint256
Amount = Annotated[int, Field(ge=0, le=UINT256_MAX, strict=True)]

# Opaque account identifier (an address on the reference platform)
ParticipantId = Annotated[str, Field(min_length=1)]

# Opaque asset identifier (a token address on the reference platform)
AssetId = Annotated[str, Field(min_length=1)]
