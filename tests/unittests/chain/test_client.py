from unittest.mock import MagicMock

import pytest
from hexbytes import HexBytes

from tests.unittests.constants import ISSUER_ADDRESS, TEST_PRIVATE_KEYS
from zcb_player.chain.client import ChainClient
from zcb_player.chain.types import TransactionRequest
from zcb_player.exceptions import (
    CallReverted,
    EstimationRejected,
    ScenarioTxError,
    SubmissionFailed,
)


def _receipt(status=1):
    return {
        "status": status,
        "transactionHash": HexBytes(b"\x03" * 32),
        "from": "0x" + "44" * 20,
        "to": ISSUER_ADDRESS,
        "blockNumber": 5,
        "gasUsed": 30000,
        "logs": [],
    }


@pytest.fixture
def web3_mock():
    return MagicMock()


@pytest.fixture
def client(web3_mock):
    return ChainClient(web3_mock)


@pytest.fixture
def request_to_issuer(accounts):
    return TransactionRequest(sender=accounts[0].address, to=ISSUER_ADDRESS, data="0x01")


class TestAccounts:
    def test_account_from_private_key(self):
        account = ChainClient.account_from_private_key(TEST_PRIVATE_KEYS[0])
        assert account.address == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"
        assert account.private_key == (1).to_bytes(32, "big")

    def test_configured_keys_take_precedence(self, web3_mock):
        client = ChainClient(web3_mock, private_keys=TEST_PRIVATE_KEYS[:2])
        assert [account.private_key[-1] for account in client.initial_accounts()] == [1, 2]

    def test_rpc_chain_without_keys_raises(self, client):
        with pytest.raises(ScenarioTxError):
            client.initial_accounts()


class TestErrorTranslation:
    def test_estimation_failure(self, client, web3_mock, request_to_issuer):
        error = ValueError("execution reverted")
        web3_mock.eth.estimate_gas.side_effect = error
        with pytest.raises(EstimationRejected) as exc_info:
            client.estimate_gas(request_to_issuer)
        assert exc_info.value.__cause__ is error

    def test_estimation_passes_call_params(self, client, web3_mock, request_to_issuer):
        web3_mock.eth.estimate_gas.return_value = 25000
        assert client.estimate_gas(request_to_issuer) == 25000
        web3_mock.eth.estimate_gas.assert_called_once_with(request_to_issuer.to_call_params())

    def test_signing_incomplete_request_fails(self, client, accounts, request_to_issuer):
        with pytest.raises(SubmissionFailed):
            client.sign_transaction(accounts[0], request_to_issuer)

    def test_send_failure(self, client, web3_mock):
        web3_mock.eth.send_raw_transaction.side_effect = ConnectionError("gone")
        with pytest.raises(SubmissionFailed):
            client.send_signed(b"\x01")

    def test_reverted_receipt_is_attached(self, client, web3_mock):
        web3_mock.eth.wait_for_transaction_receipt.return_value = _receipt(status=0)
        with pytest.raises(SubmissionFailed) as exc_info:
            client.send_signed(b"\x01")
        assert exc_info.value.result is not None
        assert exc_info.value.result.block_number == 5

    def test_successful_send(self, client, web3_mock):
        web3_mock.eth.wait_for_transaction_receipt.return_value = _receipt()
        result = client.send_signed(b"\x01")
        assert result.succeeded
        web3_mock.eth.send_raw_transaction.assert_called_once_with(b"\x01")

    def test_call_failure(self, client, web3_mock, request_to_issuer):
        web3_mock.eth.call.side_effect = ValueError("execution reverted")
        with pytest.raises(CallReverted):
            client.call(request_to_issuer)

    def test_call_returns_bytes(self, client, web3_mock, request_to_issuer):
        web3_mock.eth.call.return_value = HexBytes(b"\x00\x01")
        assert client.call(request_to_issuer) == b"\x00\x01"

    def test_evm_mine_error(self, client, web3_mock):
        web3_mock.provider.make_request.return_value = {"error": "method not found"}
        with pytest.raises(ScenarioTxError, match="evm_mine"):
            client.mine(1_700_000_000)
        web3_mock.provider.make_request.assert_called_once_with(
            "evm_mine", [{"timestamp": 1_700_000_000}]
        )


class TestTesterChain:
    @pytest.fixture(scope="class")
    def tester_client(self):
        pytest.importorskip("eth_tester")
        return ChainClient.from_url("tester")

    def test_is_tester(self, tester_client):
        assert tester_client.is_tester

    def test_initial_accounts_are_funded(self, tester_client):
        accounts = tester_client.initial_accounts()
        assert [account.address for account in accounts] == tester_client.web3.eth.accounts
        assert tester_client.get_balance(accounts[0].address) > 0

    def test_sign_and_send_value_transfer(self, tester_client):
        sender, receiver = tester_client.initial_accounts()[:2]
        before = tester_client.get_balance(receiver.address)
        request = TransactionRequest(
            sender=sender.address, to=receiver.address, value=1000, data="0x"
        )
        request.gas = tester_client.estimate_gas(request)
        request.gas_price = tester_client.gas_price()
        request.nonce = tester_client.get_nonce(sender.address)
        request.chain_id = tester_client.chain_id

        result = tester_client.send_signed(tester_client.sign_transaction(sender, request))

        assert result.succeeded
        assert tester_client.get_balance(receiver.address) == before + 1000

    def test_mine_moves_block_time(self, tester_client):
        latest = tester_client.get_block()
        block = tester_client.mine(latest.timestamp + 3600)
        assert block.timestamp >= latest.timestamp + 3600
        assert block.number > latest.number
