import pytest

from biblestudy.codec.bcs import (
    MalformedLength,
    RecordDecodeError,
    TruncatedRecord,
    decode_claim_records,
    encode_claim_records,
    encode_uleb128,
    read_uleb128,
)


def _literal_buffer() -> bytes:
    return b"".join(
        [
            bytes([0x01]),  # count
            bytes([0x00]),  # day_of_week
            (0).to_bytes(8, "little"),
            (1_700_000_000_000).to_bytes(8, "little"),
            bytes([0x03]) + b"Joh",
            (19800).to_bytes(8, "little"),
            (1).to_bytes(8, "little"),
        ]
    )


def test_literal_buffer_decodes_single_record():
    records = decode_claim_records(_literal_buffer())

    assert len(records) == 1
    record = records[0]
    assert record.day_of_week == 0
    assert record.amount_claimed == 0
    assert record.timestamp == 1_700_000_000_000
    assert record.verse_reference == b"Joh"
    assert record.verse_reference_text == "Joh"
    assert record.claim_day == 19800
    assert record.streak_at_claim == 1


def test_list_of_byte_values_is_accepted():
    records = decode_claim_records(list(_literal_buffer()))

    assert len(records) == 1
    assert records[0].verse_reference == b"Joh"


@pytest.mark.parametrize("data", [b"", [], None, "not bytes", 42, [1, 300], {"a": 1}])
def test_empty_or_non_buffer_input_decodes_to_nothing(data):
    assert decode_claim_records(data) == []


def test_zero_count_decodes_to_nothing():
    assert decode_claim_records(b"\x00") == []


def test_synthetic_records_survive_encode_and_decode(record_factory):
    records = [
        record_factory(19723, "Genesis 1:1", streak=1, amount=10_000_000),
        record_factory(19724, "Psalm 23:1", streak=2, amount=10_000_000),
        record_factory(19725, "", streak=3, amount=15_000_000),
        record_factory(19726, "Jean 3:16 (Louis Segond) é", streak=4, amount=2**64 - 1),
    ]

    assert decode_claim_records(encode_claim_records(records)) == records


def test_truncation_at_every_offset_fails(record_factory):
    data = encode_claim_records([record_factory(19800, "John 3:16"), record_factory(19801, "Acts 2:38")])

    for cut in range(1, len(data)):
        with pytest.raises(TruncatedRecord):
            decode_claim_records(data[:cut])


def test_truncation_reports_offset():
    data = _literal_buffer()

    with pytest.raises(RecordDecodeError) as exc:
        decode_claim_records(data[:5])

    assert exc.value.offset == 2


def test_oversized_verse_length_is_malformed():
    data = bytearray(_literal_buffer()[:18])
    data += encode_uleb128(2**31)

    with pytest.raises(MalformedLength):
        decode_claim_records(bytes(data))


def test_oversized_count_is_malformed():
    with pytest.raises(MalformedLength):
        decode_claim_records(encode_uleb128(2**32))


def test_count_larger_than_payload_is_truncated():
    data = bytearray(_literal_buffer())
    data[0] = 0x02

    with pytest.raises(TruncatedRecord):
        decode_claim_records(bytes(data))


def test_uleb128_multi_byte_values():
    assert read_uleb128(b"\x80\x01", 0) == (128, 2)
    assert read_uleb128(b"\xff\xff\x03", 0) == (65535, 3)
    assert encode_uleb128(300) == b"\xac\x02"
