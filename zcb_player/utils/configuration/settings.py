import os
from pathlib import Path
from typing import List, Mapping, Optional

import structlog

from zcb_player.constants import (
    DEFAULT_CHAIN,
    DEFAULT_CONTRACT_TYPE,
    DEPLOY_GAS_LIMIT,
    ENV_CHAIN,
    ContractType,
)
from zcb_player.exceptions.config import ArtifactNotFound, SettingsConfigurationError
from zcb_player.utils.artifacts import default_artifacts_dir, resolve_contract_type
from zcb_player.utils.configuration.base import ConfigMapping

log = structlog.get_logger(__name__)


class SettingsConfig(ConfigMapping):
    """Settings Configuration Setting interface and validator.

    Handles default values as well as exception handling on invalid settings.
    Values passed as `overrides` (usually from the command line) take
    precedence over the file's contents.

    Example scenario definition::

        >my_scenario.yaml
        settings:
          chain: tester
          artifacts_dir: ../contracts
          gas_limit: 30000000
          contract_type: zcb-issuer
          private_keys:
            - 0x4c0883a6...
        ...
    """

    CONFIGURATION_ERROR = SettingsConfigurationError

    def __init__(
        self,
        loaded_definition: Mapping,
        base_dir: Optional[Path] = None,
        overrides: Optional[Mapping] = None,
    ) -> None:
        settings = dict(loaded_definition.get("settings") or {})
        settings.update({key: value for key, value in (overrides or {}).items() if value})
        super(SettingsConfig, self).__init__(settings)
        #: Relative `artifacts_dir` values are resolved against this directory.
        self.base_dir = base_dir
        self.validate()

    def validate(self):
        self.assert_option(self.gas_limit > 0, "Option 'gas_limit' must be a positive integer!")
        for key in self.private_keys:
            self.assert_option(
                isinstance(key, str) and len(key.lower().replace("0x", "", 1)) == 64,
                "Option 'private_keys' must only contain 32 byte hex strings!",
            )
        try:
            self.contract_type
        except ArtifactNotFound as e:
            raise self.CONFIGURATION_ERROR(str(e)) from e

    @property
    def chain(self) -> str:
        """The chain to run against: ``tester`` or a JSON-RPC URL.

        Falls back to ``$ZCB_CHAIN``, then to the in-process tester chain.
        """
        return self.typed_option("chain", str, os.environ.get(ENV_CHAIN, DEFAULT_CHAIN))

    @property
    def artifacts_dir(self) -> Path:
        configured = self.typed_option("artifacts_dir", (str, Path))
        if configured is None:
            return default_artifacts_dir()
        path = Path(configured).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir.joinpath(path)
        return path

    @property
    def gas_limit(self) -> int:
        """Gas ceiling used for contract deployments."""
        return self.typed_option("gas_limit", int, DEPLOY_GAS_LIMIT)

    @property
    def private_keys(self) -> List[str]:
        """Keys of the scenario accounts, required for chains other than ``tester``."""
        return list(self.typed_option("private_keys", list, []))

    @property
    def contract_type(self) -> ContractType:
        value = self.dict.get("contract_type")
        if value is None:
            return DEFAULT_CONTRACT_TYPE
        return resolve_contract_type(value)
