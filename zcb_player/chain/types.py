from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from eth_typing import ChecksumAddress, HexStr
from eth_utils import to_bytes, to_checksum_address
from hexbytes import HexBytes
from web3.types import TxParams

from zcb_player.utils.abi import ABI


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return to_bytes(hexstr=HexStr(value))
    return bytes(value)


@dataclass(frozen=True)
class Account:
    address: ChecksumAddress
    private_key: bytes = field(repr=False)

    def __str__(self):
        return self.address


@dataclass(frozen=True)
class BlockInfo:
    number: int
    timestamp: int


@dataclass
class TransactionRequest:
    """A transaction as it is built before signing.

    A missing `to` means contract creation. `gas` is always estimated by the
    ledger, except for deployments, which use a fixed ceiling.
    """

    sender: ChecksumAddress
    data: HexStr = HexStr("0x")
    value: int = 0
    to: Optional[ChecksumAddress] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None
    chain_id: Optional[int] = None

    def to_call_params(self) -> TxParams:
        """Parameters for read-only requests (``eth_call``, ``eth_estimateGas``)."""
        params: Dict[str, Any] = {"from": self.sender, "data": self.data, "value": self.value}
        if self.to is not None:
            params["to"] = self.to
        return params  # type: ignore

    def to_transaction_dict(self) -> Dict[str, Any]:
        """The dict handed to :mod:`eth_account` for signing.

        :raises ValueError: if gas, gas price, nonce or chain id have not been populated.
        """
        missing = [
            name
            for name in ("gas", "gas_price", "nonce", "chain_id")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"Transaction is missing {', '.join(missing)}")

        transaction = {
            "data": self.data,
            "value": self.value,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
            "chainId": self.chain_id,
        }
        if self.to is not None:
            transaction["to"] = self.to
        return transaction


@dataclass(frozen=True)
class LogEntry:
    address: ChecksumAddress
    topics: Tuple[bytes, ...]
    data: bytes

    @classmethod
    def from_receipt_log(cls, log: Mapping[str, Any]) -> "LogEntry":
        return cls(
            address=to_checksum_address(log["address"]),
            topics=tuple(_as_bytes(topic) for topic in log["topics"]),
            data=_as_bytes(log["data"]),
        )


class TransactionStatus(Enum):
    SUCCESS = 1
    REVERTED = 0


@dataclass(frozen=True)
class TransactionResult:
    status: TransactionStatus
    transaction_hash: HexBytes
    sender: ChecksumAddress
    to: Optional[ChecksumAddress] = None
    contract_address: Optional[ChecksumAddress] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    logs: Tuple[LogEntry, ...] = ()
    #: Event fields decoded by the log decoder, `None` if the destination is not a known contract.
    decoded: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.status is TransactionStatus.SUCCESS

    @classmethod
    def from_receipt(cls, receipt: Mapping[str, Any]) -> "TransactionResult":
        to = receipt.get("to")
        contract_address = receipt.get("contractAddress")
        return cls(
            status=TransactionStatus(int(receipt.get("status", 1))),
            transaction_hash=HexBytes(receipt["transactionHash"]),
            sender=to_checksum_address(receipt["from"]),
            to=to_checksum_address(to) if to else None,
            contract_address=to_checksum_address(contract_address) if contract_address else None,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
            logs=tuple(LogEntry.from_receipt_log(log) for log in receipt.get("logs", [])),
        )


@dataclass(frozen=True)
class DeployedContract:
    contract_address: ChecksumAddress
    issuer: ChecksumAddress
    abi: ABI
    transaction_hash: Optional[HexBytes] = None
    block_number: Optional[int] = None
