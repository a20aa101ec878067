from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import structlog
from eth_utils import is_address, to_checksum_address

from zcb_player.chain.client import ChainClient
from zcb_player.chain.events import LogDecoder
from zcb_player.chain.transactions import TransactionSubmitter
from zcb_player.chain.types import Account, DeployedContract
from zcb_player.constants import (
    ACCOUNTS_REFERENCE,
    DEFAULT_CONTRACT_TYPE,
    DEPLOY_GAS_LIMIT,
    REFERENCE_PREFIX,
    ContractType,
)
from zcb_player.exceptions import ScenarioError
from zcb_player.utils.abi import ContractInterface

log = structlog.get_logger(__name__)


@dataclass
class ScenarioContext:
    """Everything the tasks of a scenario share.

    Accounts and the chain facades are created once by the runner. Deployed
    contracts and named values are added by tasks as the scenario progresses.

    Task arguments may refer to entries of the context::

        "$issuer"       # address of the contract registered as "issuer"
        "$bond_total"   # value stored as "bond_total"
        "$accounts.2"   # address of the third account
    """

    client: ChainClient
    submitter: TransactionSubmitter
    decoder: LogDecoder
    accounts: List[Account]
    artifacts_dir: Path
    gas_limit: int = DEPLOY_GAS_LIMIT
    #: Issuer variant deployed by default and used as the default transaction target.
    contract_type: ContractType = DEFAULT_CONTRACT_TYPE
    contracts: Dict[str, DeployedContract] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def owner(self) -> Account:
        """The account deploying the contracts."""
        return self.account(0)

    def account(self, identifier: Union[int, str]) -> Account:
        """Return the account for an index, an ``$accounts.<i>`` reference or an address."""
        if isinstance(identifier, str) and not is_address(identifier):
            identifier = self.resolve(identifier)
        if isinstance(identifier, str) and is_address(identifier):
            for account in self.accounts:
                if account.address.lower() == identifier.lower():
                    return account
            raise ScenarioError(f"No private key known for address {identifier}")
        try:
            index = int(identifier)
        except (TypeError, ValueError):
            raise ScenarioError(f"Invalid account reference: {identifier!r}") from None
        if not 0 <= index < len(self.accounts):
            raise ScenarioError(
                f"Account index {index} out of range, {len(self.accounts)} accounts available"
            )
        return self.accounts[index]

    def add_contract(self, name: str, contract: DeployedContract) -> None:
        if name in self.contracts:
            log.warning("Replacing registered contract", name=name)
        self.contracts[name] = contract
        log.debug("Registered contract", name=name, address=contract.contract_address)

    def contract(self, name: str) -> DeployedContract:
        name = name[len(REFERENCE_PREFIX) :] if name.startswith(REFERENCE_PREFIX) else name
        try:
            return self.contracts[name]
        except KeyError:
            raise ScenarioError(f"No contract named {name!r} has been deployed") from None

    def interface(self, name: str) -> ContractInterface:
        return ContractInterface(self.contract(name).abi)

    def store(self, name: str, value: Any) -> None:
        log.debug("Storing value", name=name, value=value)
        self.values[name] = value

    def _resolve_reference(self, reference: str) -> Any:
        if reference.startswith(ACCOUNTS_REFERENCE + "."):
            _, _, index = reference.partition(".")
            return self.account(index).address
        if reference in self.contracts:
            return self.contracts[reference].contract_address
        if reference in self.values:
            return self.values[reference]
        raise ScenarioError(f"Unknown reference: {REFERENCE_PREFIX}{reference}")

    def resolve(self, value: Any) -> Any:
        """Replace references in `value`, recursing into lists and dicts.

        :raises ScenarioError: if a reference names neither a contract, a value nor an account.
        """
        if isinstance(value, str) and value.startswith(REFERENCE_PREFIX):
            return self._resolve_reference(value[len(REFERENCE_PREFIX) :])
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        if isinstance(value, dict):
            return {key: self.resolve(item) for key, item in value.items()}
        return value

    def address_of(self, value: Any) -> str:
        """Resolve `value` to a checksum address; integers are account indices."""
        if isinstance(value, int) and not isinstance(value, bool):
            return self.account(value).address
        resolved = self.resolve(value)
        if not isinstance(resolved, str) or not is_address(resolved):
            raise ScenarioError(f"{value!r} does not resolve to an address")
        return to_checksum_address(resolved)
