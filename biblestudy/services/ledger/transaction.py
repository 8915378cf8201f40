"""
BCS serialisation of a single-call programmable TransactionKind.

devInspect only needs the transaction kind, not a signed transaction, so this
covers exactly what read-only Move calls use: pure arguments, shared objects
and one MoveCall command.
"""

from dataclasses import dataclass

from biblestudy.codec.bcs import encode_byte_vector, encode_u64, encode_uleb128

ADDRESS_LENGTH = 32

# Enum variant tags
TRANSACTION_KIND_PROGRAMMABLE = 0
CALL_ARG_PURE = 0
CALL_ARG_OBJECT = 1
OBJECT_ARG_SHARED = 1
COMMAND_MOVE_CALL = 0
ARGUMENT_INPUT = 1


def address_bytes(address: str) -> bytes:
    """Normalise a 0x-prefixed Sui address or object ID to its 32 raw bytes."""
    hex_part = address.lower().removeprefix("0x")
    if not hex_part or len(hex_part) > ADDRESS_LENGTH * 2:
        raise ValueError(f"Invalid Sui address: {address!r}")
    return bytes.fromhex(hex_part.rjust(ADDRESS_LENGTH * 2, "0"))


def _encode_string(value: str) -> bytes:
    return encode_byte_vector(value.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class PureArg:
    value: bytes

    def encode(self) -> bytes:
        return encode_uleb128(CALL_ARG_PURE) + encode_byte_vector(self.value)


@dataclass(frozen=True, slots=True)
class SharedObjectArg:
    object_id: str
    initial_shared_version: int
    mutable: bool = False

    def encode(self) -> bytes:
        return b"".join(
            [
                encode_uleb128(CALL_ARG_OBJECT),
                encode_uleb128(OBJECT_ARG_SHARED),
                address_bytes(self.object_id),
                encode_u64(self.initial_shared_version),
                b"\x01" if self.mutable else b"\x00",
            ]
        )


def pure_address(address: str) -> PureArg:
    return PureArg(address_bytes(address))


def pure_u64(value: int) -> PureArg:
    return PureArg(encode_u64(value))


def split_target(target: str) -> tuple[str, str, str]:
    """Split package::module::function."""
    parts = target.split("::")
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Move target must be package::module::function, got {target!r}")
    return parts[0], parts[1], parts[2]


def build_move_call_kind(target: str, inputs: list[PureArg | SharedObjectArg]) -> bytes:
    """
    Serialise TransactionKind::ProgrammableTransaction with one MoveCall that
    passes every input, in order, as Argument::Input(i).
    """
    package, module, function = split_target(target)

    encoded_inputs = encode_uleb128(len(inputs)) + b"".join(arg.encode() for arg in inputs)

    arguments = encode_uleb128(len(inputs)) + b"".join(
        encode_uleb128(ARGUMENT_INPUT) + index.to_bytes(2, "little") for index in range(len(inputs))
    )
    move_call = b"".join(
        [
            encode_uleb128(COMMAND_MOVE_CALL),
            address_bytes(package),
            _encode_string(module),
            _encode_string(function),
            encode_uleb128(0),  # type arguments
            arguments,
        ]
    )
    commands = encode_uleb128(1) + move_call

    return encode_uleb128(TRANSACTION_KIND_PROGRAMMABLE) + encoded_inputs + commands
