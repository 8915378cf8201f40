"""
BCS decoding of on-chain claim records.
"""

from biblestudy.codec.bcs import (
    MalformedLength,
    RecordDecodeError,
    TruncatedRecord,
    decode_claim_records,
    encode_claim_records,
)

__all__ = [
    "MalformedLength",
    "RecordDecodeError",
    "TruncatedRecord",
    "decode_claim_records",
    "encode_claim_records",
]
