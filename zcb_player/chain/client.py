from typing import List, Optional, Sequence, Union

import structlog
from eth_account import Account as EthAccount
from eth_typing import ChecksumAddress
from eth_utils import encode_hex, to_checksum_address
from hexbytes import HexBytes
from web3 import EthereumTesterProvider, HTTPProvider, Web3
from web3.types import BlockIdentifier, RPCEndpoint

from zcb_player.chain.types import Account, BlockInfo, TransactionRequest, TransactionResult
from zcb_player.constants import DEFAULT_CHAIN
from zcb_player.exceptions import (
    CallReverted,
    EstimationRejected,
    ScenarioTxError,
    SubmissionFailed,
)

log = structlog.get_logger(__name__)

PrivateKey = Union[bytes, str]


class ChainClient:
    """Facade over the ledger's JSON-RPC interface.

    Every method blocks until the ledger has answered. Failures are raised as
    the scenario player's transaction errors, chained to the original cause.
    """

    def __init__(self, web3: Web3, private_keys: Sequence[PrivateKey] = ()) -> None:
        self.web3 = web3
        self._private_keys = list(private_keys)

    @classmethod
    def from_url(cls, chain_url: str = DEFAULT_CHAIN, private_keys: Sequence[PrivateKey] = ()):
        """Create a client for `chain_url`.

        ``tester`` starts an in-process ledger (eth-tester backed by py-evm),
        anything else is treated as the URL of a JSON-RPC node.
        """
        if chain_url == DEFAULT_CHAIN:
            provider = EthereumTesterProvider()
        else:
            provider = HTTPProvider(chain_url)
        log.debug("Creating chain client", chain=chain_url)
        return cls(Web3(provider), private_keys=private_keys)

    @property
    def is_tester(self) -> bool:
        return isinstance(self.web3.provider, EthereumTesterProvider)

    @property
    def chain_id(self) -> int:
        return self.web3.eth.chain_id

    @staticmethod
    def account_from_private_key(private_key: PrivateKey) -> Account:
        local_account = EthAccount.from_key(private_key)
        return Account(address=local_account.address, private_key=bytes(local_account.key))

    def initial_accounts(self) -> List[Account]:
        """Return the pre-funded accounts of the ledger.

        Keys passed to the client take precedence. Without them, the accounts
        of the in-process tester are used.
        """
        if self._private_keys:
            return [self.account_from_private_key(key) for key in self._private_keys]
        if self.is_tester:
            keys = self.web3.provider.ethereum_tester.backend.account_keys
            return [self.account_from_private_key(key.to_bytes()) for key in keys]
        raise ScenarioTxError("No private keys configured for a JSON-RPC chain!")

    def gas_price(self) -> int:
        return self.web3.eth.gas_price

    def get_nonce(self, address: ChecksumAddress) -> int:
        return self.web3.eth.get_transaction_count(address, "pending")

    def get_balance(self, address: str) -> int:
        return self.web3.eth.get_balance(to_checksum_address(address))

    def get_block(self, tag: BlockIdentifier = "latest") -> BlockInfo:
        block = self.web3.eth.get_block(tag)
        return BlockInfo(number=block["number"], timestamp=block["timestamp"])

    def estimate_gas(self, request: TransactionRequest) -> int:
        """Ask the ledger for the gas the transaction will need.

        :raises EstimationRejected:
            if the ledger declines, usually because the transaction would revert.
        """
        try:
            return self.web3.eth.estimate_gas(request.to_call_params())
        except Exception as e:
            log.debug(
                "Gas estimation rejected", to=request.to, sender=request.sender, error=str(e)
            )
            raise EstimationRejected(f"Gas estimation rejected: {e}") from e

    def sign_transaction(self, account: Account, request: TransactionRequest) -> HexBytes:
        try:
            transaction = request.to_transaction_dict()
            signed = EthAccount.sign_transaction(transaction, account.private_key)
        except (TypeError, ValueError) as e:
            raise SubmissionFailed(f"Could not sign transaction: {e}") from e
        return HexBytes(signed.raw_transaction)

    def send_signed(self, raw_transaction: bytes) -> TransactionResult:
        """Submit a signed transaction and wait until it is mined.

        :raises SubmissionFailed:
            if sending or mining fails, or the transaction was reverted. In
            the latter case the converted receipt is attached to the error.
        """
        try:
            tx_hash = self.web3.eth.send_raw_transaction(raw_transaction)
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            raise SubmissionFailed(f"Transaction submission failed: {e}") from e

        result = TransactionResult.from_receipt(receipt)
        log.debug(
            "Transaction mined",
            tx_hash=encode_hex(result.transaction_hash),
            status=result.status.name,
            block=result.block_number,
        )
        if not result.succeeded:
            raise SubmissionFailed(
                f"Transaction {encode_hex(result.transaction_hash)} reverted", result=result
            )
        return result

    def call(self, request: TransactionRequest, block: BlockIdentifier = "latest") -> bytes:
        """Execute a read-only call and return the raw return data.

        :raises CallReverted: if the call is rejected.
        """
        try:
            return bytes(self.web3.eth.call(request.to_call_params(), block))
        except Exception as e:
            raise CallReverted(f"Call to {request.to} reverted: {e}") from e

    def mine(self, timestamp: Optional[int] = None) -> BlockInfo:
        """Mine a block, at `timestamp` if given.

        Used to move block time past lock periods.
        """
        if self.is_tester:
            ethereum_tester = self.web3.provider.ethereum_tester
            if timestamp is not None:
                ethereum_tester.time_travel(timestamp)
            if timestamp is None or self.get_block("latest").timestamp < timestamp:
                # time_travel stamps its block one second early
                ethereum_tester.mine_blocks(1)
        else:
            params = [] if timestamp is None else [{"timestamp": timestamp}]
            response = self.web3.provider.make_request(RPCEndpoint("evm_mine"), params)
            if "error" in response:
                raise ScenarioTxError(f"evm_mine failed: {response['error']}")
        block = self.get_block("latest")
        log.debug("Mined block", number=block.number, timestamp=block.timestamp)
        return block
