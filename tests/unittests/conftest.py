import copy
import json
from typing import Dict, List
from unittest.mock import MagicMock

import pytest
from eth_abi import encode
from eth_utils import event_abi_to_log_topic, to_checksum_address
from hexbytes import HexBytes
from tests.unittests.constants import (
    ABI_BY_CONTRACT_TYPE,
    BYTECODE,
    ISSUER_ABI,
    ISSUER_ADDRESS,
    TEST_PRIVATE_KEYS,
    TOKEN_ABI,
    ZCB_ABI,
)

from zcb_player import tasks
from zcb_player.chain.client import ChainClient
from zcb_player.chain.events import LogDecoder
from zcb_player.chain.transactions import TransactionSubmitter
from zcb_player.chain.types import (
    BlockInfo,
    DeployedContract,
    LogEntry,
    TransactionResult,
    TransactionStatus,
)
from zcb_player.constants import ARTIFACT_PATHS
from zcb_player.context import ScenarioContext
from zcb_player.tasks.base import Task, collect_tasks


@pytest.fixture(scope="session", autouse=True)
def _collect_tasks():
    collect_tasks(tasks)


@pytest.fixture
def issuer_abi():
    return copy.deepcopy(ISSUER_ABI)


@pytest.fixture
def zcb_abi():
    return copy.deepcopy(ZCB_ABI)


@pytest.fixture
def token_abi():
    return copy.deepcopy(TOKEN_ABI)


@pytest.fixture
def minimal_definition_dict():
    """A dictionary with the minimum required keys for instantiating any ConfigMapping."""
    return {
        "scenario": {"serial": {"tasks": [{"store_value": {"name": "fee", "value": 1}}]}},
        "settings": {},
    }


@pytest.fixture
def artifacts_dir(tmp_path):
    """An artifacts root holding a `.bin` and `.abi` file for every contract type."""
    root = tmp_path.joinpath("contracts")
    for contract_type, paths in ARTIFACT_PATHS.items():
        bin_path = root.joinpath(paths.bin)
        abi_path = root.joinpath(paths.abi)
        bin_path.parent.mkdir(parents=True, exist_ok=True)
        abi_path.parent.mkdir(parents=True, exist_ok=True)
        bin_path.write_text(BYTECODE + "\n")
        abi_path.write_text(json.dumps(ABI_BY_CONTRACT_TYPE[contract_type]))
    return root


@pytest.fixture
def accounts():
    return [ChainClient.account_from_private_key(key) for key in TEST_PRIVATE_KEYS]


@pytest.fixture
def make_result():
    """Factory for mined transaction results."""

    def _make_result(to=ISSUER_ADDRESS, logs=(), status=TransactionStatus.SUCCESS, **kwargs):
        kwargs.setdefault("sender", to_checksum_address(f"0x44{1:038d}"))
        return TransactionResult(
            status=status,
            transaction_hash=HexBytes(b"\x01" * 32),
            to=to,
            block_number=kwargs.pop("block_number", 7),
            gas_used=kwargs.pop("gas_used", 21000),
            logs=tuple(logs),
            **kwargs,
        )

    return _make_result


@pytest.fixture
def create_log(issuer_abi):
    """Factory for raw ``Create`` log entries as emitted by the issuer contract."""
    event_abi = next(entry for entry in issuer_abi if entry.get("name") == "Create")
    topic = event_abi_to_log_topic(event_abi)

    def _create_log(contract_address, issuer, emitter=ISSUER_ADDRESS):
        return LogEntry(
            address=emitter,
            topics=(
                topic,
                encode(["address"], [contract_address]),
                encode(["address"], [issuer]),
            ),
            data=b"",
        )

    return _create_log


@pytest.fixture
def mocked_client(accounts):
    client = MagicMock(spec=ChainClient)
    client.chain_id = 1337
    client.is_tester = True
    client.gas_price.return_value = 10 ** 9
    client.get_nonce.return_value = 0
    client.estimate_gas.return_value = 50_000
    client.sign_transaction.return_value = HexBytes(b"\xf8signed")
    client.initial_accounts.return_value = accounts
    client.account_from_private_key.side_effect = ChainClient.account_from_private_key
    client.get_block.return_value = BlockInfo(number=10, timestamp=1_700_000_000)
    return client


@pytest.fixture
def scenario_context(mocked_client, accounts, artifacts_dir):
    decoder = LogDecoder()
    submitter = MagicMock(spec=TransactionSubmitter)
    submitter.default_to = None
    return ScenarioContext(
        client=mocked_client,
        submitter=submitter,
        decoder=decoder,
        accounts=accounts,
        artifacts_dir=artifacts_dir,
    )


@pytest.fixture
def issuer_contract(issuer_abi, accounts):
    return DeployedContract(
        contract_address=ISSUER_ADDRESS, issuer=accounts[0].address, abi=issuer_abi
    )


@pytest.fixture
def mocked_scenario_runner(scenario_context):
    class DummyScenarioRunner:
        def __init__(self):
            self.context = scenario_context
            self.task_cache: Dict[str, Task] = {}
            self.task_count = 0
            self.state_changes: List = []

        def task_state_changed(self, task, new_state):
            self.state_changes.append((task, new_state))

    return DummyScenarioRunner()
