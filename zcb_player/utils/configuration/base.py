from collections.abc import Mapping
from typing import Optional, Tuple, Union

from zcb_player.exceptions.config import ConfigurationError


class ConfigMapping(Mapping):
    """Read-only view of one section of a scenario definition.

    Subclasses set :attr:`CONFIGURATION_ERROR` to the error raised for
    invalid options of their section.
    """

    CONFIGURATION_ERROR = ConfigurationError

    def __init__(self, loaded_yaml: Optional[Mapping]):
        self.dict = loaded_yaml or {}

    def __getitem__(self, item):
        return self.dict[item]

    def __iter__(self):
        return iter(self.dict)

    def __len__(self):
        return len(self.dict)

    def __repr__(self):
        return f"{self.__class__.__qualname__}({self.dict})"

    @classmethod
    def assert_option(cls, expression, message: Optional[str] = None) -> None:
        """Raise :attr:`CONFIGURATION_ERROR` with `message` unless `expression` holds."""
        if not expression:
            raise cls.CONFIGURATION_ERROR(message)

    def typed_option(self, key: str, expected_type: Union[type, Tuple[type, ...]], default=None):
        """Return the option `key`, asserting it is an instance of `expected_type`.

        Absent or null options return `default` without a type check.
        """
        value = self.dict.get(key)
        if value is None:
            return default
        self.assert_option(
            isinstance(value, expected_type),
            f"Option '{key}' has an invalid type: {type(value).__name__}",
        )
        return value
