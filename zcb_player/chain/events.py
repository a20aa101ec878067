import dataclasses
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

import structlog
from eth_utils import event_abi_to_log_topic, to_checksum_address

from zcb_player.chain.types import TransactionResult
from zcb_player.constants import DEFAULT_DECODED_EVENTS
from zcb_player.exceptions import DecodeMismatch
from zcb_player.utils.abi import ABI, ContractInterface, decode_log

log = structlog.get_logger(__name__)


class DecoderRegistration(NamedTuple):
    interface: ContractInterface
    event_names: Tuple[str, ...]


class LogDecoder:
    """Annotate transaction results with the fields of events they emitted.

    Contracts are registered by address together with the names of the events
    that are of interest. Results of transactions sent to any other address
    are passed through untouched.

    Example::

        >>> decoder = LogDecoder()
        >>> decoder.register(issuer.contract_address, issuer.abi)
        >>> decoder.decode(result).decoded["contractAddress"]
        '0x...'
    """

    def __init__(self) -> None:
        self._registry: Dict[str, DecoderRegistration] = {}

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._registry

    def __len__(self):
        return len(self._registry)

    def register(
        self, address: str, abi: ABI, event_names: Sequence[str] = DEFAULT_DECODED_EVENTS
    ) -> None:
        self._registry[address.lower()] = DecoderRegistration(
            interface=ContractInterface(abi), event_names=tuple(event_names)
        )
        log.debug(
            "Registered contract for log decoding",
            address=to_checksum_address(address),
            events=list(event_names),
        )

    def unregister(self, address: str) -> None:
        self._registry.pop(address.lower(), None)

    def registration(self, address: Optional[str]) -> Optional[DecoderRegistration]:
        if address is None:
            return None
        return self._registry.get(address.lower())

    def decode(self, result: TransactionResult) -> TransactionResult:
        """Return `result` with the decoded event fields attached as `decoded`.

        All logs matching one of the registered events are merged into a
        single mapping in the order they were emitted; on name collisions the
        later log wins. Logs that do not match the event's shape are skipped.
        """
        registration = self.registration(result.to)
        if registration is None:
            return result

        events_by_topic = self._events_by_topic(registration, result.to)
        decoded: Dict[str, Any] = {}
        for index, entry in enumerate(result.logs):
            event_abi = events_by_topic.get(entry.topics[0]) if entry.topics else None
            if event_abi is None:
                continue
            try:
                decoded.update(decode_log(event_abi, entry.topics, entry.data))
            except DecodeMismatch as e:
                log.warning(
                    "Skipping undecodable log",
                    index=index,
                    event_name=event_abi["name"],
                    reason=str(e),
                )

        return dataclasses.replace(result, decoded=decoded)

    @staticmethod
    def _events_by_topic(
        registration: DecoderRegistration, to: Optional[str]
    ) -> Dict[bytes, Dict[str, Any]]:
        events: Dict[bytes, Dict[str, Any]] = {}
        for event_name in registration.event_names:
            if not registration.interface.has_event(event_name):
                log.warning("Event not part of the contract's ABI", event_name=event_name, to=to)
                continue
            event_abi = registration.interface.event(event_name)
            events[event_abi_to_log_topic(event_abi)] = event_abi
        return events
