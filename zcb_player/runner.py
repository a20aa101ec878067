from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Mapping, Optional

import structlog

from zcb_player.chain.client import ChainClient
from zcb_player.chain.events import LogDecoder
from zcb_player.chain.transactions import TransactionSubmitter
from zcb_player.context import ScenarioContext
from zcb_player.definition import ScenarioDefinition
from zcb_player.exceptions import ScenarioError

if TYPE_CHECKING:
    from zcb_player.tasks.base import Task, TaskState

log = structlog.get_logger(__name__)


class ScenarioRunner:
    """Set up the chain facades for a scenario definition and run its root task.

    The client may be passed in, e.g. to share one in-process ledger between
    several runs; otherwise one is created for the configured chain.
    """

    def __init__(
        self,
        scenario_file: Path,
        overrides: Optional[Mapping] = None,
        client: Optional[ChainClient] = None,
        task_state_callback: Optional[
            Callable[["ScenarioRunner", "Task", "TaskState"], None]
        ] = None,
    ) -> None:
        self.task_count = 0
        self.task_cache: Dict[str, "Task"] = {}
        self.task_state_callback = task_state_callback

        self.definition = ScenarioDefinition(scenario_file, overrides=overrides)
        settings = self.definition.settings

        self.client = client or ChainClient.from_url(
            settings.chain, private_keys=settings.private_keys
        )
        accounts = self.client.initial_accounts()
        if not accounts:
            raise ScenarioError(f"No accounts available on chain {settings.chain}")
        log.info("Using accounts", owner=accounts[0].address, count=len(accounts))

        decoder = LogDecoder()
        self.context = ScenarioContext(
            client=self.client,
            submitter=TransactionSubmitter(self.client, decoder),
            decoder=decoder,
            accounts=accounts,
            artifacts_dir=settings.artifacts_dir,
            gas_limit=settings.gas_limit,
            contract_type=settings.contract_type,
        )

        task_config = self.definition.scenario.root_config
        task_class = self.definition.scenario.root_class
        self.root_task = task_class(runner=self, config=task_config)

    def run_scenario(self) -> None:
        log.info(
            "Running scenario",
            name=self.definition.name,
            chain=self.definition.settings.chain,
            tasks=self.task_count,
        )
        self.root_task()

    def task_state_changed(self, task: "Task", state: "TaskState"):
        if self.task_state_callback:
            self.task_state_callback(self, task, state)
