from zcb_player.utils.configuration.scenario import ScenarioConfig
from zcb_player.utils.configuration.settings import SettingsConfig

__all__ = ["ScenarioConfig", "SettingsConfig"]
