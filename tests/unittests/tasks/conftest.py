import pytest

from zcb_player.tasks.base import get_task_class_for_type


@pytest.fixture
def task_by_name(mocked_scenario_runner):
    def get_task(task_type, config):
        task_class = get_task_class_for_type(task_type)
        return task_class(runner=mocked_scenario_runner, config=config)

    return get_task
