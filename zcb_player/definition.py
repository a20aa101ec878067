import os
import pathlib
from typing import Mapping, Optional

import jinja2
import structlog
import yaml

from zcb_player.exceptions.config import ScenarioConfigurationError
from zcb_player.utils.configuration.scenario import ScenarioConfig
from zcb_player.utils.configuration.settings import SettingsConfig

log = structlog.get_logger(__name__)


class ScenarioDefinition:
    """Interface for a Scenario `.yaml` file.

    Takes care of loading the yaml from the given `yaml_path`, and validates
    its contents. `overrides` replace values of the `settings` section.
    """

    def __init__(self, yaml_path: pathlib.Path, overrides: Optional[Mapping] = None) -> None:
        self.path = yaml_path
        # Use the scenario file as jinja template and only parse the yaml, afterwards.
        with yaml_path.open() as f:
            yaml_template = jinja2.Template(f.read(), undefined=jinja2.StrictUndefined)
            try:
                rendered_yaml = yaml_template.render(env=os.environ)
            except jinja2.UndefinedError as e:
                raise ScenarioConfigurationError(f"Cannot render {yaml_path}: {e}") from e
        try:
            self._loaded = yaml.safe_load(rendered_yaml)
        except yaml.YAMLError as e:
            raise ScenarioConfigurationError(f"{yaml_path} is not valid YAML!") from e

        if not isinstance(self._loaded, dict):
            raise ScenarioConfigurationError(f"{yaml_path} does not contain a mapping!")

        self.settings = SettingsConfig(
            self._loaded, base_dir=yaml_path.parent.absolute(), overrides=overrides
        )
        self.scenario = ScenarioConfig(self._loaded)
        log.debug("Loaded scenario definition", name=self.name, chain=self.settings.chain)

    @property
    def name(self) -> str:
        """Return the name of the scenario file, sans extension."""
        return self.path.stem
