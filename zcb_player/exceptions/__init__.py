from zcb_player.exceptions.config import (
    ArtifactNotFound,
    ConfigurationError,
    MalformedArtifact,
    ScenarioConfigurationError,
    SettingsConfigurationError,
)
from zcb_player.exceptions.scenario import (
    CallReverted,
    DecodeMismatch,
    DeploymentFailed,
    EstimationRejected,
    InvalidArguments,
    ScenarioAssertionError,
    ScenarioError,
    ScenarioTxError,
    SubmissionFailed,
    UnknownFunction,
    UnknownTaskTypeError,
)

__all__ = [
    "ArtifactNotFound",
    "CallReverted",
    "ConfigurationError",
    "DecodeMismatch",
    "DeploymentFailed",
    "EstimationRejected",
    "InvalidArguments",
    "MalformedArtifact",
    "ScenarioAssertionError",
    "ScenarioConfigurationError",
    "ScenarioError",
    "ScenarioTxError",
    "SettingsConfigurationError",
    "SubmissionFailed",
    "UnknownFunction",
    "UnknownTaskTypeError",
]
