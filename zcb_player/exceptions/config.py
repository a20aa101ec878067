class ConfigurationError(ValueError):
    """Generic error thrown if there was an error while reading the scenario file."""


class ScenarioConfigurationError(ConfigurationError):
    """An error occurred while validating the scenario setting of a scenario file."""


class SettingsConfigurationError(ConfigurationError):
    """An error occurred while validating the settings section of a scenario file."""


class ArtifactNotFound(ConfigurationError):
    """The requested contract type has no known artifact."""


class MalformedArtifact(ConfigurationError):
    """The contract's interface description could not be parsed.

    Raised if the ABI file is not valid JSON, or not a JSON list.
    """
