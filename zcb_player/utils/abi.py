"""Encode calls and decode results and events for a contract, given its ABI.

A :class:`ContractInterface` replaces dynamic method dispatch on a contract
object: functions are looked up by name (or by their full signature, for
overloaded functions) and arguments are encoded according to the ABI.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_typing import HexStr
from eth_utils import (
    encode_hex,
    event_abi_to_log_topic,
    function_abi_to_4byte_selector,
    is_address,
    to_bytes,
    to_checksum_address,
)
from eth_utils.abi import collapse_if_tuple

from zcb_player.exceptions import DecodeMismatch, InvalidArguments, UnknownFunction

log = structlog.get_logger(__name__)

ABI = List[Dict[str, Any]]
ABIEntry = Dict[str, Any]


def abi_types(params: Sequence[ABIEntry]) -> List[str]:
    return [collapse_if_tuple(param) for param in params]


def abi_signature(entry: ABIEntry) -> str:
    """Return the canonical signature of an ABI entry, e.g. ``transfer(address,uint256)``."""
    return f"{entry['name']}({','.join(abi_types(entry.get('inputs', [])))})"


def _to_int(value: Any) -> int:
    if isinstance(value, str):
        value = value.strip()
        if value.lower().startswith(("0x", "-0x")):
            return int(value, 16)
        return int(value)
    return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise ValueError(f"Cannot interpret {value!r} as bool")
    return bool(value)


def normalize_argument(abi_type: str, value: Any) -> Any:
    """Coerce a value given in a scenario definition to what the ABI encoder expects.

    Integers may be given as (hex-)strings, booleans as ``"true"``/``"false"``
    and addresses in any casing. Tuple types are passed through untouched.
    """
    if abi_type.endswith("]"):
        inner = abi_type[: abi_type.rindex("[")]
        return [normalize_argument(inner, item) for item in value]
    if abi_type.startswith("("):
        return value
    if abi_type.startswith(("uint", "int")):
        return _to_int(value)
    if abi_type == "bool":
        return _to_bool(value)
    if abi_type == "address" and isinstance(value, str) and is_address(value):
        return to_checksum_address(value)
    if abi_type.startswith("bytes") and isinstance(value, str):
        return to_bytes(hexstr=HexStr(value))
    return value


def normalize_result(abi_type: str, value: Any) -> Any:
    """Checksum all addresses in a decoded value."""
    if abi_type.endswith("]"):
        inner = abi_type[: abi_type.rindex("[")]
        return [normalize_result(inner, item) for item in value]
    if abi_type == "address":
        return to_checksum_address(value)
    return value


def is_hashed_topic(abi_type: str) -> bool:
    """Indexed reference types are stored as the keccak hash of their value."""
    return abi_type in ("string", "bytes") or abi_type.endswith("]") or abi_type.startswith("(")


def decode_log(event_abi: ABIEntry, topics: Sequence[bytes], data: bytes) -> Dict[str, Any]:
    """Decode a raw log entry into a mapping of parameter name to value.

    Indexed parameters are read from `topics`, all others from `data`.
    Indexed reference types (strings, bytes, arrays, structs) cannot be
    recovered and are returned as the raw 32-byte topic.

    :raises DecodeMismatch:
        if the number of topics does not match the event's indexed
        parameters, or `data` cannot be decoded using the event's types.
    """
    inputs = event_abi.get("inputs", [])
    indexed = [param for param in inputs if param.get("indexed")]
    not_indexed = [param for param in inputs if not param.get("indexed")]

    topics = list(topics)
    if not event_abi.get("anonymous", False):
        topics = topics[1:]

    if len(topics) != len(indexed):
        raise DecodeMismatch(
            f"Event {event_abi.get('name')} expects {len(indexed)} indexed topics, "
            f"log has {len(topics)}"
        )

    values: Dict[str, Any] = {}
    try:
        for param, topic in zip(indexed, topics):
            param_type = collapse_if_tuple(param)
            if is_hashed_topic(param_type):
                values[param["name"]] = topic
            else:
                (decoded,) = decode([param_type], topic)
                values[param["name"]] = normalize_result(param_type, decoded)

        decoded_data = decode(abi_types(not_indexed), data)
    except DecodingError as e:
        raise DecodeMismatch(f"Log data does not match event {event_abi.get('name')}") from e

    for param, value in zip(not_indexed, decoded_data):
        values[param["name"]] = normalize_result(collapse_if_tuple(param), value)

    # Preserve the declaration order of the event's parameters.
    return {param["name"]: values[param["name"]] for param in inputs}


class ContractInterface:
    """Static binding of a contract ABI.

    Example::

        >>> issuer = ContractInterface(artifact.abi)
        >>> data = issuer.encode_call("changeCreationFee", 10 ** 18)
    """

    def __init__(self, abi: ABI) -> None:
        self.abi = abi

    def __repr__(self):
        return f"<{self.__class__.__name__}: {len(self.abi)} entries>"

    def _entries(self, entry_type: str) -> List[ABIEntry]:
        return [entry for entry in self.abi if entry.get("type", "function") == entry_type]

    @property
    def function_signatures(self) -> List[str]:
        return [abi_signature(entry) for entry in self._entries("function")]

    def function(self, name: str, args: Optional[Sequence[Any]] = None) -> ABIEntry:
        """Return the ABI of the function matching `name`.

        `name` may be a plain function name or a full signature such as
        ``safeTransferFrom(address,address,uint256)``. Overloads of a plain
        name are told apart by the number of `args`.

        :raises UnknownFunction: if no single function matches.
        """
        functions = self._entries("function")
        if "(" in name:
            candidates = [entry for entry in functions if abi_signature(entry) == name]
        else:
            candidates = [entry for entry in functions if entry.get("name") == name]
            if len(candidates) > 1 and args is not None:
                candidates = [
                    entry for entry in candidates if len(entry.get("inputs", [])) == len(args)
                ]

        if not candidates:
            raise UnknownFunction(f"Contract has no function {name!r}")
        if len(candidates) > 1:
            signatures = ", ".join(abi_signature(entry) for entry in candidates)
            raise UnknownFunction(
                f"Function name {name!r} is ambiguous, use one of the signatures: {signatures}"
            )
        return candidates[0]

    def event(self, name: str) -> ABIEntry:
        for entry in self._entries("event"):
            if entry.get("name") == name:
                return entry
        raise UnknownFunction(f"Contract has no event {name!r}")

    def has_event(self, name: str) -> bool:
        return any(entry.get("name") == name for entry in self._entries("event"))

    def event_topic(self, name: str) -> bytes:
        return event_abi_to_log_topic(self.event(name))

    @staticmethod
    def _encode_arguments(params: Sequence[ABIEntry], args: Sequence[Any]) -> bytes:
        types = abi_types(params)
        if len(types) != len(args):
            raise InvalidArguments(f"Expected {len(types)} arguments, got {len(args)}")
        try:
            normalized = [normalize_argument(t, arg) for t, arg in zip(types, args)]
            return encode(types, normalized)
        except (EncodingError, ValueError, TypeError) as e:
            raise InvalidArguments(f"Cannot encode {list(args)!r} as {types}: {e}") from e

    def encode_call(self, name: str, *args: Any) -> HexStr:
        """Return the call data for `name`: its 4-byte selector followed by the encoded args."""
        fn_abi = self.function(name, args)
        selector = function_abi_to_4byte_selector(fn_abi)
        return encode_hex(selector + self._encode_arguments(fn_abi.get("inputs", []), args))

    def encode_constructor(self, args: Sequence[Any] = ()) -> bytes:
        constructors = self._entries("constructor")
        if not constructors:
            if args:
                raise InvalidArguments("Contract has no constructor, but arguments were given")
            return b""
        return self._encode_arguments(constructors[0].get("inputs", []), args)

    def decode_output(self, name: str, data: bytes, args: Optional[Sequence[Any]] = None) -> Any:
        """Decode the return data of a call to `name`.

        A function with a single output returns that value, otherwise a tuple.

        :raises DecodeMismatch: if `data` does not match the function's outputs.
        """
        fn_abi = self.function(name, args)
        types = abi_types(fn_abi.get("outputs", []))
        try:
            decoded: Tuple = decode(types, data)
        except DecodingError as e:
            raise DecodeMismatch(f"Cannot decode output of {name!r}: {e}") from e
        values = tuple(normalize_result(t, value) for t, value in zip(types, decoded))
        if len(values) == 1:
            return values[0]
        return values
