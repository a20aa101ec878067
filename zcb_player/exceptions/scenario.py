from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from zcb_player.chain.types import TransactionResult


class ScenarioError(Exception):
    exit_code = 20


class ScenarioTxError(ScenarioError):
    exit_code = 21


class EstimationRejected(ScenarioTxError):
    """The ledger declined to estimate gas, typically because the transaction would revert."""

    exit_code = 22


class SubmissionFailed(ScenarioTxError):
    """Signing, sending or mining a transaction failed.

    If the transaction was mined but reverted, the converted receipt is
    available as :attr:`result`.
    """

    exit_code = 23

    def __init__(self, message, result: Optional["TransactionResult"] = None):
        super().__init__(message)
        self.result = result


class DeploymentFailed(ScenarioTxError):
    exit_code = 24


class CallReverted(ScenarioTxError):
    """A read-only call was rejected by the contract."""

    exit_code = 25


class InvalidArguments(ScenarioTxError):
    """The call arguments cannot be ABI-encoded, nothing was sent."""

    exit_code = 26


class UnknownTaskTypeError(ScenarioError):
    exit_code = 27


class UnknownFunction(ScenarioError):
    """The contract's ABI has no function matching the requested name."""

    exit_code = 28


class DecodeMismatch(ScenarioError):
    """Raw log or return data does not match the shape of its ABI entry.

    The log decoder skips log entries raising this.
    """


class ScenarioAssertionError(ScenarioError):
    exit_code = 30
