"""Helper functions shared by the provider and the pipeline."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes
from web3 import Web3

from .exceptions import InvalidInputError

_ADDRESS_FIELDS = ("from", "to")
_QUANTITY_FIELDS = (
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "value",
    "nonce",
    "chainId",
)


def to_hex_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC quantity (``0x``-prefixed)."""
    if value < 0:
        raise InvalidInputError("Quantity cannot be negative", field="value", value=value)
    return hex(value)


def parse_quantity(value: Any, field: str) -> int:
    """Decode a JSON-RPC quantity given as hex string, decimal string or int."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid quantity for {field}", field=field, value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError as exc:
            raise InvalidInputError(
                f"Invalid quantity for {field}", field=field, value=value
            ) from exc
    raise InvalidInputError(f"Invalid quantity for {field}", field=field, value=value)


def normalise_tx_params(raw: Any) -> dict[str, Any]:
    """Convert a JSON-RPC transaction object into web3-ready parameters.

    Addresses are checksummed and quantities decoded to ints; any other
    field is passed through untouched.
    """
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            "Transaction parameters must be an object", field="params[0]", value=raw
        )

    params: dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in _ADDRESS_FIELDS:
            if not Web3.is_address(value):
                raise InvalidInputError(f"Invalid address for {key}", field=key, value=value)
            params[key] = Web3.to_checksum_address(value)
        elif key in _QUANTITY_FIELDS:
            params[key] = parse_quantity(value, key)
        else:
            params[key] = value
    return params


def first_param(params: Sequence[Any], method: str) -> Any:
    """Return the first positional parameter, which every handled method requires."""
    if not params:
        raise InvalidInputError(f"{method} requires at least one parameter", field="params")
    return params[0]


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt


def read_field(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present field from an attribute-style or mapping-style object."""
    for name in names:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default
