"""
BCS codec for DailyClaimInfo vectors returned by the progress registry.

Layout (little-endian):
    uleb128 count
    count x { u8 day_of_week, u64 amount_claimed, u64 timestamp,
              uleb128 len + len bytes verse_reference, u64 claim_day,
              u64 streak_at_claim }

Every reader takes the buffer and an offset and returns (value, new_offset).
"""

from collections.abc import Iterable

from biblestudy.models.domain.claim_domain import ClaimRecord

# Longest sequence BCS allows for vectors and strings
MAX_SEQUENCE_LENGTH = (1 << 31) - 1
U64_MAX = (1 << 64) - 1


class RecordDecodeError(Exception):
    """Raised when a claim record buffer cannot be decoded."""

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(message)
        self.offset = offset


class TruncatedRecord(RecordDecodeError):
    """The buffer ended before the current field was complete."""


class MalformedLength(RecordDecodeError):
    """A length prefix exceeds what a BCS sequence may hold."""


def _require(buf: bytes, offset: int, size: int, field: str) -> None:
    if offset + size > len(buf):
        raise TruncatedRecord(
            f"Truncated {field}: need {size} bytes at offset {offset}, buffer has {len(buf)}",
            offset=offset,
        )


def read_uleb128(buf: bytes, offset: int) -> tuple[int, int]:
    value = 0
    shift = 0
    while True:
        _require(buf, offset, 1, "uleb128")
        byte = buf[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        shift += 7
        if byte & 0x80 == 0:
            return value, offset


def read_u8(buf: bytes, offset: int) -> tuple[int, int]:
    _require(buf, offset, 1, "u8")
    return buf[offset], offset + 1


def read_u64(buf: bytes, offset: int) -> tuple[int, int]:
    _require(buf, offset, 8, "u64")
    return int.from_bytes(buf[offset : offset + 8], "little"), offset + 8


def read_length(buf: bytes, offset: int) -> tuple[int, int]:
    """Read a uleb128 sequence length and reject values BCS cannot represent."""
    length, new_offset = read_uleb128(buf, offset)
    if length > MAX_SEQUENCE_LENGTH:
        raise MalformedLength(
            f"Sequence length {length} exceeds BCS maximum {MAX_SEQUENCE_LENGTH}",
            offset=offset,
        )
    return length, new_offset


def read_byte_vector(buf: bytes, offset: int) -> tuple[bytes, int]:
    length, offset = read_length(buf, offset)
    _require(buf, offset, length, "vector<u8>")
    return bytes(buf[offset : offset + length]), offset + length


def read_claim_record(buf: bytes, offset: int) -> tuple[ClaimRecord, int]:
    day_of_week, offset = read_u8(buf, offset)
    amount_claimed, offset = read_u64(buf, offset)
    timestamp, offset = read_u64(buf, offset)
    verse_reference, offset = read_byte_vector(buf, offset)
    claim_day, offset = read_u64(buf, offset)
    streak_at_claim, offset = read_u64(buf, offset)
    record = ClaimRecord(
        day_of_week=day_of_week,
        amount_claimed=amount_claimed,
        timestamp=timestamp,
        verse_reference=verse_reference,
        claim_day=claim_day,
        streak_at_claim=streak_at_claim,
    )
    return record, offset


def _as_buffer(data) -> bytes | None:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, (list, tuple)):
        if all(isinstance(item, int) and 0 <= item <= 0xFF for item in data):
            return bytes(data)
    return None


def decode_claim_records(data) -> list[ClaimRecord]:
    """
    Decode a BCS vector<DailyClaimInfo>.

    Args:
        data: bytes-like object or list of byte values

    Returns:
        list[ClaimRecord]: records in wire order; empty for empty or non-buffer input

    Raises:
        TruncatedRecord: If the buffer ends mid-record
        MalformedLength: If a length prefix is out of range
    """
    buf = _as_buffer(data)
    if not buf:
        return []

    count, offset = read_length(buf, 0)
    records = []
    for _ in range(count):
        record, offset = read_claim_record(buf, offset)
        records.append(record)
    return records


def encode_uleb128(value: int) -> bytes:
    if value < 0:
        raise ValueError("uleb128 cannot encode negative values")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_u64(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"{value} does not fit in u64")
    return value.to_bytes(8, "little")


def encode_byte_vector(data: bytes) -> bytes:
    return encode_uleb128(len(data)) + bytes(data)


def encode_claim_record(record: ClaimRecord) -> bytes:
    if not 0 <= record.day_of_week <= 0xFF:
        raise ValueError(f"day_of_week {record.day_of_week} does not fit in u8")
    return b"".join(
        [
            bytes([record.day_of_week]),
            encode_u64(record.amount_claimed),
            encode_u64(record.timestamp),
            encode_byte_vector(record.verse_reference),
            encode_u64(record.claim_day),
            encode_u64(record.streak_at_claim),
        ]
    )


def encode_claim_records(records: Iterable[ClaimRecord]) -> bytes:
    records = list(records)
    return encode_uleb128(len(records)) + b"".join(encode_claim_record(r) for r in records)
