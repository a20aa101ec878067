import pytest

from zcb_player.exceptions import ScenarioError, UnknownTaskTypeError
from zcb_player.tasks.base import TaskState
from zcb_player.tasks.execution import StoreValueTask


class TestSerialTask:
    def test_child_tasks_run_in_order(self, task_by_name, scenario_context):
        task = task_by_name(
            "serial",
            {
                "name": "Setup",
                "tasks": [
                    {"store_value": {"name": "fee", "value": 1}},
                    {"store_value": {"name": "fee", "value": 2}},
                    {"store_value": {"name": "previous_fee", "value": "$fee"}},
                ],
            },
        )
        task()
        assert scenario_context.values == {"fee": 2, "previous_fee": 2}

    def test_tasks_are_repeated(self, task_by_name, mocked_scenario_runner):
        task = task_by_name(
            "serial", {"repeat": 3, "tasks": [{"store_value": {"name": "a", "value": 1}}]}
        )
        assert mocked_scenario_runner.task_count == 4
        task()
        assert task.state is TaskState.FINISHED

    def test_children_are_created_up_front(self, task_by_name):
        with pytest.raises(ScenarioError):
            task_by_name(
                "serial",
                {"tasks": [{"store_value": {"name": "a", "value": 1}}, {"store_value": {}}]},
            )

    def test_unknown_child_task_raises(self, task_by_name):
        with pytest.raises(UnknownTaskTypeError):
            task_by_name("serial", {"tasks": [{"parallel": {}}]})

    def test_failing_child_stops_the_run(self, task_by_name, scenario_context):
        task = task_by_name(
            "serial",
            {
                "tasks": [
                    {"store_value": {"name": "a", "value": "$unknown"}},
                    {"store_value": {"name": "b", "value": 1}},
                ]
            },
        )
        with pytest.raises(ScenarioError):
            task()
        assert "b" not in scenario_context.values
        assert task.state is TaskState.ERRORED

    def test_non_mapping_config_raises(self, task_by_name):
        with pytest.raises(ScenarioError):
            task_by_name("serial", ["tasks"])

    def test_name_is_shown_in_the_task_tree(self, task_by_name):
        task = task_by_name(
            "serial", {"name": "Setup", "tasks": [{"store_value": {"name": "a", "value": 1}}]}
        )
        rendered = str(task)
        assert "Setup" in rendered
        assert "StoreValue" in rendered


class TestStoreValueTask:
    def test_value_is_resolved_and_stored(self, task_by_name, scenario_context, accounts):
        task = task_by_name("store_value", {"name": "bond_issuer", "value": "$accounts.1"})
        assert isinstance(task, StoreValueTask)
        assert task() == {"bond_issuer": accounts[1].address}
        assert scenario_context.values["bond_issuer"] == accounts[1].address

    def test_lists_are_resolved(self, task_by_name, scenario_context):
        scenario_context.store("total", 1000)
        task_by_name("store_value", {"name": "ids", "value": [0, "$total"]})()
        assert scenario_context.values["ids"] == [0, 1000]

    def test_name_and_value_are_required(self, task_by_name):
        with pytest.raises(ScenarioError):
            task_by_name("store_value", {"name": "a"})
