import pytest
from hexbytes import HexBytes

from tests.unittests.constants import BOND_ADDRESS, ISSUER_ADDRESS
from zcb_player.chain.types import (
    LogEntry,
    TransactionRequest,
    TransactionResult,
    TransactionStatus,
)

SENDER = "0x" + "44" * 20


class TestTransactionRequest:
    def test_call_params_omit_missing_destination(self):
        params = TransactionRequest(sender=SENDER, data="0x01").to_call_params()
        assert params == {"from": SENDER, "data": "0x01", "value": 0}

    def test_call_params_include_destination(self):
        params = TransactionRequest(sender=SENDER, to=ISSUER_ADDRESS).to_call_params()
        assert params["to"] == ISSUER_ADDRESS

    def test_transaction_dict_requires_populated_fields(self):
        request = TransactionRequest(sender=SENDER, gas=21000)
        with pytest.raises(ValueError, match="gas_price, nonce, chain_id"):
            request.to_transaction_dict()

    def test_transaction_dict(self):
        request = TransactionRequest(
            sender=SENDER,
            to=ISSUER_ADDRESS,
            data="0x01",
            value=3,
            gas=21000,
            gas_price=1,
            nonce=2,
            chain_id=1337,
        )
        assert request.to_transaction_dict() == {
            "to": ISSUER_ADDRESS,
            "data": "0x01",
            "value": 3,
            "gas": 21000,
            "gasPrice": 1,
            "nonce": 2,
            "chainId": 1337,
        }


class TestTransactionResult:
    @pytest.fixture
    def receipt(self):
        return {
            "status": 1,
            "transactionHash": HexBytes(b"\x02" * 32),
            "from": SENDER,
            "to": ISSUER_ADDRESS.lower(),
            "contractAddress": None,
            "blockNumber": 12,
            "gasUsed": 42000,
            "logs": [
                {
                    "address": BOND_ADDRESS.lower(),
                    "topics": ["0x" + "ab" * 32],
                    "data": "0x",
                }
            ],
        }

    def test_from_receipt(self, receipt):
        result = TransactionResult.from_receipt(receipt)
        assert result.succeeded
        assert result.to == ISSUER_ADDRESS
        assert result.contract_address is None
        assert result.block_number == 12
        assert result.gas_used == 42000
        assert result.decoded is None
        assert result.logs == (
            LogEntry(address=BOND_ADDRESS, topics=(b"\xab" * 32,), data=b""),
        )

    def test_reverted_receipt(self, receipt):
        receipt["status"] = 0
        result = TransactionResult.from_receipt(receipt)
        assert result.status is TransactionStatus.REVERTED
        assert not result.succeeded

    def test_contract_creation_receipt(self, receipt):
        receipt["to"] = None
        receipt["contractAddress"] = BOND_ADDRESS.lower()
        result = TransactionResult.from_receipt(receipt)
        assert result.to is None
        assert result.contract_address == BOND_ADDRESS
