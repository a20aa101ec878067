from typing import Any, List

import click
import structlog

from zcb_player import runner as scenario_runner
from zcb_player.exceptions import ScenarioError
from zcb_player.tasks.base import Task, get_task_class_for_type

log = structlog.get_logger(__name__)


class SerialTask(Task):
    """Run the child tasks one after the other, `repeat` times.

    Example::

        - serial:
            name: "Fee changes"
            repeat: 2
            tasks:
              - transact: {...}
              - assert_call: {...}
    """

    _name = "serial"

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        super().__init__(runner, config, parent)
        if not isinstance(config, dict):
            raise ScenarioError(f"Serial task expects a mapping, got {config!r}")
        self._name = config.get("name")

        self._tasks: List = []
        for _ in range(config.get("repeat", 1)):
            for task in self._config.get("tasks", []):
                for task_type, task_config in task.items():
                    task_class = get_task_class_for_type(task_type)
                    self._tasks.append(
                        task_class(runner=self._runner, config=task_config, parent=self)
                    )

    def _run(self, *args, **kwargs):  # pylint: disable=unused-argument
        for task in self._tasks:
            task()

    @property
    def _str_details(self):
        name = ""
        if self._name:
            name = f' - {click.style(self._name, fg="blue")}'
        tasks = "\n".join(str(t) for t in self._tasks)
        return f"{name}\n{tasks}"


class StoreValueTask(Task):
    """Remember a value under a name, for later reference as ``$<name>``.

    Used to keep track of the expected contract state, e.g. the current fee::

        - store_value: {name: creation_fee, value: 1000000000000000000}
    """

    _name = "store_value"
    REQUIRED_OPTIONS = ("name", "value")

    def _run(self, *args, **kwargs):  # pylint: disable=unused-argument
        value = self.context.resolve(self._config["value"])
        self.context.store(self._config["name"], value)
        return {self._config["name"]: value}
