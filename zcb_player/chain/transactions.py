from typing import Optional

import structlog
from eth_typing import ChecksumAddress, HexStr
from eth_utils import encode_hex, to_checksum_address

from zcb_player.chain.client import ChainClient, PrivateKey
from zcb_player.chain.events import LogDecoder
from zcb_player.chain.types import TransactionRequest, TransactionResult

log = structlog.get_logger(__name__)


class TransactionSubmitter:
    """Build, sign and send transactions on behalf of scenario accounts.

    Each call to :meth:`submit` makes exactly one attempt. Whether a failure
    was expected is up to the caller.
    """

    def __init__(
        self,
        client: ChainClient,
        decoder: Optional[LogDecoder] = None,
        default_to: Optional[str] = None,
    ) -> None:
        self.client = client
        self.decoder = decoder if decoder is not None else LogDecoder()
        #: Destination used if :meth:`submit` is not given one, usually the issuer contract.
        self.default_to = default_to

    def build_request(
        self,
        sender: ChecksumAddress,
        data: HexStr,
        value: int = 0,
        to_address: Optional[str] = None,
    ) -> TransactionRequest:
        destination = to_address or self.default_to
        if not destination:
            raise ValueError("No destination given and no default contract address set!")
        return TransactionRequest(
            sender=sender, to=to_checksum_address(destination), data=data, value=int(value)
        )

    def submit(
        self,
        data: HexStr,
        private_key: PrivateKey,
        value: int = 0,
        to_address: Optional[str] = None,
    ) -> TransactionResult:
        """Send a transaction and return its decoded result.

        :raises EstimationRejected:
            if the ledger refuses to estimate gas, which is the usual sign of
            a transaction the contract would reject.

        :raises SubmissionFailed:
            if signing or sending fails, or the transaction reverts on-chain.
        """
        account = self.client.account_from_private_key(private_key)
        request = self.build_request(account.address, data, value, to_address)

        request.gas = self.client.estimate_gas(request)
        request.gas_price = self.client.gas_price()
        request.nonce = self.client.get_nonce(account.address)
        request.chain_id = self.client.chain_id

        log.debug(
            "Submitting transaction",
            sender=account.address,
            to=request.to,
            value=request.value,
            gas=request.gas,
        )
        result = self.client.send_signed(self.client.sign_transaction(account, request))
        log.info(
            "Transaction successful",
            tx_hash=encode_hex(result.transaction_hash),
            to=result.to,
            gas_used=result.gas_used,
        )
        return self.decoder.decode(result)
