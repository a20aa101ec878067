import importlib
import inspect
import pkgutil
import time
from copy import copy
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

import click
import structlog

from zcb_player import runner as scenario_runner
from zcb_player.exceptions import ScenarioError, UnknownTaskTypeError

log = structlog.get_logger(__name__)

NAME_TO_TASK: Dict[str, Type["Task"]] = {}


class TaskState(Enum):
    INITIALIZED = " "
    RUNNING = "•"
    FINISHED = "✔"
    ERRORED = "✗"


TASK_STATE_COLOR = {
    TaskState.INITIALIZED: "",
    TaskState.RUNNING: click.style("", fg="yellow", reset=False),
    TaskState.FINISHED: click.style("", fg="green", reset=False),
    TaskState.ERRORED: click.style("", fg="red", reset=False),
}

_TASK_ID = 0


class Task:
    """A single step of a scenario.

    Subclasses set `_name` to the key used in scenario definitions and
    implement :meth:`_run`. Options listed in `REQUIRED_OPTIONS` are checked
    when the task is created, so a broken definition fails before the first
    transaction is sent.
    """

    _name: str
    REQUIRED_OPTIONS: Sequence[str] = ()

    def __init__(
        self, runner: scenario_runner.ScenarioRunner, config: Any, parent: "Task" = None
    ) -> None:
        global _TASK_ID

        _TASK_ID = _TASK_ID + 1
        self.id = str(_TASK_ID)
        self._runner = runner
        self._config = copy(config)
        self._parent = parent
        self._state = TaskState.INITIALIZED
        self.exception: Optional[BaseException] = None
        self.level: int = parent.level + 1 if parent else 0
        self._start_time: Optional[float] = None
        self._stop_time: Optional[float] = None

        self._check_required_options()

        runner.task_cache[self.id] = self
        runner.task_count += 1

    def _check_required_options(self) -> None:
        if not self.REQUIRED_OPTIONS:
            return
        if not isinstance(self._config, dict):
            raise ScenarioError(f"Task '{self._name}' expects a mapping, got {self._config!r}")
        missing = [key for key in self.REQUIRED_OPTIONS if key not in self._config]
        if missing:
            raise ScenarioError(
                f"Task '{self._name}' is missing required options: {', '.join(missing)}"
            )

    def __call__(self, *args, **kwargs):
        log.info("Starting task", task=self, id=self.id)
        self.state = TaskState.RUNNING
        self._start_time = time.monotonic()
        try:
            return_val = self._run(*args, **kwargs)
        except BaseException as ex:
            self.state = TaskState.ERRORED
            log.exception("Task errored", task=self)
            self.exception = ex
            raise
        finally:
            self._stop_time = time.monotonic()

        runtime = self._stop_time - self._start_time
        log.info("Task successful", id=self.id, task=self, runtime=runtime)
        self.state = TaskState.FINISHED
        return return_val

    def _run(self, *args, **kwargs):  # pylint: disable=unused-argument,no-self-use
        raise NotImplementedError

    @property
    def context(self):
        return self._runner.context

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._config}>"

    def __str__(self):
        color = TASK_STATE_COLOR[self.state]
        reset = click.style("", reset=True)
        return (
            f'{" " * self.level * 2}- [{color}{self.state.value}{reset}] '
            f'{color}{self.__class__.__name__.replace("Task", "")}{reset}'
            f"{self._duration}{self._str_details}"
        )

    @property
    def _str_details(self):
        return f": {self._config}"

    @property
    def _duration(self):
        duration = 0.0
        if self._start_time:
            if self._stop_time:
                duration = self._stop_time - self._start_time
            else:
                duration = time.monotonic() - self._start_time
        if duration:
            return " " + str(timedelta(seconds=duration))
        return ""

    @property
    def done(self):
        return self.state in {TaskState.FINISHED, TaskState.ERRORED}

    @property
    def state(self):
        return self._state

    @state.setter
    def state(self, new_state):
        self._state = new_state
        self._runner.task_state_changed(self, self._state)


def get_task_class_for_type(task_type: str) -> Type[Task]:
    task_class = NAME_TO_TASK.get(task_type)
    if not task_class:
        raise UnknownTaskTypeError(f'Task type "{task_type}" is unknown.')
    return task_class


def register_task(task_name, task):
    global NAME_TO_TASK
    NAME_TO_TASK[task_name] = task


def registered_task_names() -> List[str]:
    return sorted(NAME_TO_TASK)


def collect_tasks(module):
    # If module is a package, discover inner packages / submodules
    for sub_module in pkgutil.iter_modules(path=module.__path__):
        _, sub_module_name, _ = sub_module
        sub_module_name = module.__name__ + "." + sub_module_name
        submodule = importlib.import_module(sub_module_name)
        collect_tasks_from_submodule(submodule)


def collect_tasks_from_submodule(submodule):
    for _, member in inspect.getmembers(submodule, inspect.isclass):
        base_classes = inspect.getmro(member)
        if Task in base_classes and hasattr(member, "_name"):
            register_task(member._name, member)
