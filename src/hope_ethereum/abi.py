"""
Contract function messages.

A FunctionMessage describes one call of a contract function: its name,
argument types and values, and return types. Encoding and decoding are
delegated to eth-abi.

Example:
    >>> balance_of = FunctionMessage(
    ...     "balanceOf", ["address"], ["0x..."], ["uint256"], default_is_valid=True
    ... )
    >>> data = balance_of.encode()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector

from hope_ethereum.errors import InconclusiveResultError, ValidationError

_DEFAULTS = {
    "address": "0x0000000000000000000000000000000000000000",
    "bool": False,
    "string": "",
    "bytes": b"",
}


def default_value(abi_type: str) -> Any:
    """Zero value of an ABI type (e.g. 0 for uint256, "" for string)."""
    if abi_type.endswith("]"):
        return []
    if abi_type in _DEFAULTS:
        return _DEFAULTS[abi_type]
    if abi_type.startswith(("uint", "int")):
        return 0
    if abi_type.startswith("bytes"):
        return b"\x00" * int(abi_type[len("bytes"):])
    raise ValidationError(f"unsupported ABI type: {abi_type}")


def _is_default(abi_type: str, value: Any) -> bool:
    if abi_type == "address":
        return isinstance(value, str) and int(value, 16) == 0
    if abi_type.startswith("bytes") and not abi_type.endswith("]") and abi_type != "bytes":
        return not any(value)
    try:
        return value == default_value(abi_type)
    except ValidationError:
        return False


@dataclass(frozen=True)
class FunctionMessage:
    """
    One contract function call.

    Attributes:
        name: Function name (e.g. "transfer")
        input_types: ABI types of the arguments
        args: Argument values, matching ``input_types``
        output_types: ABI types of the return values
        default_is_valid: Accept an all-default decoded result. Leave False
            unless zero is a meaningful answer of this function, since zero
            is also what an empty response decodes to.
    """

    name: str
    input_types: Sequence[str] = field(default_factory=tuple)
    args: Sequence[Any] = field(default_factory=tuple)
    output_types: Sequence[str] = field(default_factory=tuple)
    default_is_valid: bool = False

    def __post_init__(self) -> None:
        if len(self.input_types) != len(self.args):
            raise ValidationError(
                f"{self.name} expects {len(self.input_types)} arguments, got {len(self.args)}"
            )

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self) -> bytes:
        """
        ABI-encode selector and arguments.

        Raises:
            ValidationError: If an argument does not match its type
        """
        try:
            return self.selector + encode(list(self.input_types), list(self.args))
        except (EncodingError, TypeError, ValueError) as e:
            raise ValidationError(f"cannot encode {self.signature}: {e}") from e

    def decode_output(self, data: bytes) -> Any:
        """
        Decode return data.

        Returns:
            The single value when the function returns one value,
            otherwise a tuple of values. None for functions without outputs.

        Raises:
            InconclusiveResultError: If data is empty, undecodable, or decodes
                to the default value and ``default_is_valid`` is False
        """
        if not self.output_types:
            return None
        if not data:
            raise InconclusiveResultError(
                f"{self.signature} returned no data. "
                "Please make sure the contract address has the function you are trying to execute."
            )
        try:
            values: Tuple[Any, ...] = decode(list(self.output_types), bytes(data))
        except (DecodingError, TypeError, ValueError) as e:
            raise InconclusiveResultError(f"cannot decode {self.signature} output: {e}") from e

        if not self.default_is_valid and all(
            _is_default(t, v) for t, v in zip(self.output_types, values)
        ):
            raise InconclusiveResultError(
                f"{self.signature} returned a default value, indistinguishable from no data"
            )
        return values[0] if len(values) == 1 else values

