from typing import Any

import structlog

from zcb_player import runner as scenario_runner
from zcb_player.chain.types import BlockInfo
from zcb_player.exceptions import ScenarioAssertionError, ScenarioError
from zcb_player.tasks.base import Task
from zcb_player.utils.abi import normalize_argument

log = structlog.get_logger(__name__)


class MineTask(Task):
    """Mine a block, moving block time forward relative to the latest block.

    Either a fixed number of ``seconds`` or the name of a stored value
    (``from_value``) is used, plus an optional ``offset``::

        - mine: {from_value: redeem_lock_period, offset: 1}

    Without either option a single block is mined at the ledger's own pace.
    """

    _name = "mine"

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config or {}, parent)
        if not isinstance(self._config, dict):
            raise ScenarioError(f"Task 'mine' expects a mapping, got {self._config!r}")
        if "seconds" in self._config and "from_value" in self._config:
            raise ScenarioError("'seconds' and 'from_value' are mutually exclusive")

    def _delay(self) -> int:
        if "from_value" in self._config:
            name = self._config["from_value"]
            if name not in self.context.values:
                raise ScenarioError(f"No value named {name!r} has been stored")
            seconds = self.context.values[name]
        else:
            seconds = self.context.resolve(self._config.get("seconds", 0))
        offset = self._config.get("offset", 0)
        seconds = int(normalize_argument("int256", seconds))
        return seconds + int(normalize_argument("int256", offset))

    def _run(self, *args, **kwargs) -> BlockInfo:  # pylint: disable=unused-argument
        client = self.context.client
        delay = self._delay()
        if delay < 0:
            raise ScenarioError(f"Cannot move block time backwards by {-delay} seconds")
        if not delay:
            return client.mine()

        target = client.get_block("latest").timestamp + delay
        block = client.mine(target)
        if block.timestamp < target:
            raise ScenarioAssertionError(
                f"Block {block.number} was mined at {block.timestamp}, expected >= {target}"
            )
        return block

    @property
    def _str_details(self):
        return f": {self._config}" if self._config else ""


class AssertBalanceTask(Task):
    """Assert on the native balance of an address.

    Example::

        - assert_balance: {address: "$issuer", expected: "$creation_fee"}
        - assert_balance: {address: "$accounts.0", min: 1000000000000000000}
    """

    _name = "assert_balance"
    REQUIRED_OPTIONS = ("address",)

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config, parent)
        if not any(key in self._config for key in ("expected", "min", "max")):
            raise ScenarioError("'assert_balance' requires one of 'expected', 'min' or 'max'")

    def _bound(self, key: str):
        if key not in self._config:
            return None
        return int(normalize_argument("uint256", self.context.resolve(self._config[key])))

    def _run(self, *args, **kwargs) -> int:  # pylint: disable=unused-argument
        address = self.context.address_of(self._config["address"])
        balance = self.context.client.get_balance(address)
        log.debug("Balance", address=address, balance=balance)

        expected = self._bound("expected")
        if expected is not None and balance != expected:
            raise ScenarioAssertionError(f"Balance of {address} is {balance}, expected {expected}")
        minimum = self._bound("min")
        if minimum is not None and balance < minimum:
            raise ScenarioAssertionError(f"Balance of {address} is {balance}, below {minimum}")
        maximum = self._bound("max")
        if maximum is not None and balance > maximum:
            raise ScenarioAssertionError(f"Balance of {address} is {balance}, above {maximum}")
        return balance
