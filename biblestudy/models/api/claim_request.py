# biblestudy/models/api/claim_request.py
"""
Request models for session and claim endpoints.
"""

import re

from pydantic import BaseModel, Field, field_validator

SUI_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


class SessionRequest(BaseModel):
    """Connect a wallet identity."""

    address: str = Field(..., description="Sui wallet address (0x-prefixed hex)")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        v = v.strip()
        if not SUI_ADDRESS_PATTERN.fullmatch(v):
            raise ValueError("Invalid Sui address")
        return v.lower()


class ClaimRequest(BaseModel):
    """Claim today's reward for a verse."""

    verse_reference: str = Field(
        ..., min_length=1, max_length=200, description="Verse reference, e.g. John 3:16"
    )
