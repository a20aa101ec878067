from typing import Any, Dict

import structlog
from eth_typing import HexStr
from eth_utils import encode_hex, is_address, to_bytes

from zcb_player import runner as scenario_runner
from zcb_player.chain.deployer import deploy_artifact
from zcb_player.chain.types import DeployedContract, TransactionRequest, TransactionResult
from zcb_player.constants import DEFAULT_DECODED_EVENTS, ZERO_ADDRESS
from zcb_player.exceptions import (
    EstimationRejected,
    InvalidArguments,
    ScenarioAssertionError,
    ScenarioError,
    SubmissionFailed,
)
from zcb_player.tasks.base import Task
from zcb_player.utils.abi import ContractInterface
from zcb_player.utils.artifacts import load_artifact, resolve_contract_type

log = structlog.get_logger(__name__)


def values_match(actual: Any, expected: Any) -> bool:
    """Compare a decoded contract value with one given in a scenario definition.

    Addresses compare case-insensitively, integers may be expected as
    (hex-)strings and bytes as hex strings.
    """
    if isinstance(actual, (list, tuple)):
        return (
            isinstance(expected, (list, tuple))
            and len(actual) == len(expected)
            and all(values_match(a, e) for a, e in zip(actual, expected))
        )
    if isinstance(actual, str) and is_address(actual):
        return isinstance(expected, str) and actual.lower() == expected.lower()
    if isinstance(actual, bool):
        return str(actual).lower() == str(expected).lower()
    if isinstance(actual, int):
        if isinstance(expected, bool):
            return False
        try:
            return actual == (int(expected, 0) if isinstance(expected, str) else int(expected))
        except (TypeError, ValueError):
            return False
    if isinstance(actual, bytes) and isinstance(expected, str):
        try:
            return actual == to_bytes(hexstr=HexStr(expected))
        except ValueError:
            return False
    return actual == expected


class DeployTask(Task):
    """Deploy a contract from its compiled artifact.

    Example::

        - deploy:
            contract: ZCB_ISSUER  # defaults to the issuer variant of the settings
            name: issuer          # defaults to the contract type's value
            args: []              # constructor arguments
            from: 0               # account index, defaults to the owner

    Deploying the issuer variant also registers it with the log decoder, so
    the ``Create`` event of factory calls can be stored and registered.
    """

    _name = "deploy"

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config or {}, parent)
        contract = self._config.get("contract")
        if contract is None:
            self.contract_type = self.context.contract_type
        else:
            self.contract_type = resolve_contract_type(contract)
        self.contract_name = self._config.get("name", self.contract_type.value)

    def _run(self, *args, **kwargs) -> DeployedContract:  # pylint: disable=unused-argument
        context = self.context
        artifact = load_artifact(self.contract_type, context.artifacts_dir)
        account = context.account(self._config.get("from", 0))
        constructor_args = context.resolve(self._config.get("args", []))

        deployed = deploy_artifact(
            context.client, account, artifact, constructor_args, gas_limit=context.gas_limit
        )
        context.add_contract(self.contract_name, deployed)

        is_issuer = self.contract_type is context.contract_type
        events = self._config.get("events")
        if events is None and is_issuer:
            events = DEFAULT_DECODED_EVENTS
        if events:
            context.decoder.register(deployed.contract_address, deployed.abi, events)
        if is_issuer and context.submitter.default_to is None:
            context.submitter.default_to = deployed.contract_address
        return deployed

    @property
    def _str_details(self):
        return f": {self.contract_type.name} as '{self.contract_name}'"


class TransactTask(Task):
    """Send a transaction calling a contract function.

    Example::

        - transact:
            contract: issuer
            method: create
            args: [1000, 10, "$usdt", 100, "$usdc", 110, "USDT-USDC"]
            from: 1
            value: "$creation_fee"
            store: {bond_issuer: issuer}               # value name -> event field
            register: {name: bond, contract_type: zcb}  # field defaults to contractAddress

    With ``expect_failure: true`` the task succeeds only if the transaction
    is rejected: its arguments cannot be encoded, gas estimation fails, or
    it reverts on-chain.
    """

    _name = "transact"
    REQUIRED_OPTIONS = ("contract", "method")

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config, parent)
        self.expect_failure = bool(self._config.get("expect_failure", False))
        register = self._config.get("register")
        if register is not None and not all(key in register for key in ("name", "contract_type")):
            raise ScenarioError("'register' requires the options 'name' and 'contract_type'")

    def _run(self, *args, **kwargs):  # pylint: disable=unused-argument
        context = self.context
        contract = context.contract(self._config["contract"])
        method = self._config["method"]
        call_args = context.resolve(self._config.get("args", []))
        value = int(context.resolve(self._config.get("value", 0)))
        sender = context.account(self._config.get("from", 0))

        try:
            data = ContractInterface(contract.abi).encode_call(method, *call_args)
            result = context.submitter.submit(
                data, sender.private_key, value=value, to_address=contract.contract_address
            )
        except (EstimationRejected, InvalidArguments, SubmissionFailed) as e:
            if not self.expect_failure:
                raise
            log.info("Transaction failed as expected", method=method, reason=str(e))
            return None

        if self.expect_failure:
            raise ScenarioAssertionError(
                f"Expected {method} from {sender.address} to fail, but it succeeded "
                f"in transaction {encode_hex(result.transaction_hash)}"
            )

        self._store_fields(result)
        self._register_contract(result, sender.address)
        return result

    def _decoded_field(self, result: TransactionResult, field_name: str) -> Any:
        decoded: Dict[str, Any] = result.decoded or {}
        if field_name not in decoded:
            raise ScenarioAssertionError(
                f"Transaction {encode_hex(result.transaction_hash)} emitted no event "
                f"field '{field_name}'"
            )
        return decoded[field_name]

    def _store_fields(self, result: TransactionResult) -> None:
        for value_name, field_name in (self._config.get("store") or {}).items():
            self.context.store(value_name, self._decoded_field(result, field_name))

    def _register_contract(self, result: TransactionResult, sender: str) -> None:
        register = self._config.get("register")
        if not register:
            return
        address = self._decoded_field(result, register.get("field", "contractAddress"))
        if address.lower() == ZERO_ADDRESS:
            raise ScenarioAssertionError("Created contract has the zero address")

        artifact = load_artifact(register["contract_type"], self.context.artifacts_dir)
        issuer = (result.decoded or {}).get("issuer", sender)
        if issuer.lower() == ZERO_ADDRESS:
            raise ScenarioAssertionError("Created contract has the zero address as issuer")
        self.context.add_contract(
            register["name"],
            DeployedContract(
                contract_address=address,
                issuer=issuer,
                abi=artifact.abi,
                transaction_hash=result.transaction_hash,
                block_number=result.block_number,
            ),
        )

    @property
    def _str_details(self):
        failure = " (expected to fail)" if self.expect_failure else ""
        return f": {self._config['contract']}.{self._config['method']}{failure}"


class AssertCallTask(Task):
    """Call a view function and compare the result.

    Example::

        - assert_call:
            contract: issuer
            method: creationFee
            expected: "$creation_fee"

    ``store`` saves the returned value under a name instead of, or in
    addition to, comparing it.
    """

    _name = "assert_call"
    REQUIRED_OPTIONS = ("contract", "method")

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config, parent)
        if "expected" not in self._config and "store" not in self._config:
            raise ScenarioError("'assert_call' requires 'expected' or 'store'")

    def _run(self, *args, **kwargs) -> Any:  # pylint: disable=unused-argument
        context = self.context
        contract = context.contract(self._config["contract"])
        method = self._config["method"]
        call_args = context.resolve(self._config.get("args", []))
        interface = ContractInterface(contract.abi)

        request = TransactionRequest(
            sender=context.account(self._config.get("from", 0)).address,
            to=contract.contract_address,
            data=interface.encode_call(method, *call_args),
        )
        actual = interface.decode_output(method, context.client.call(request), call_args)

        if "expected" in self._config:
            expected = context.resolve(self._config["expected"])
            if not values_match(actual, expected):
                raise ScenarioAssertionError(
                    f"{self._config['contract']}.{method} returned {actual!r}, "
                    f"expected {expected!r}"
                )
        if "store" in self._config:
            context.store(self._config["store"], actual)
        return actual

    @property
    def _str_details(self):
        return f": {self._config['contract']}.{self._config['method']}"
