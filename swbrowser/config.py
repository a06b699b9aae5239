"""Runtime settings for the databank browser.

Settings come from a YAML file (``config/settings.yaml`` by default, or the
path in ``SWBROWSER_CONFIG``) and a handful of environment overrides. Every
value has a default, so a missing default file yields a working
configuration; an explicitly named file must exist.
"""

import os
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from swbrowser.utils.config_loader import ConfigLoader


DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Environment variable -> dotted settings key
ENV_OVERRIDES = {
    "DATABANK_BASE_URL": "databank.base_url",
    "DATABANK_TIMEOUT": "databank.timeout",
    "SWAPI_BASE_URL": "swapi.base_url",
    "SWAPI_TIMEOUT": "swapi.timeout",
    "AVAILABILITY_CHECK_INTERVAL": "availability.check_interval",
    "LOG_LEVEL": "logging.level",
}


class DatabankSettings(BaseModel):
    model_config = ConfigDict(extra='forbid')

    base_url: str = "https://starwars-databank-server.vercel.app/api/v1"
    timeout: float = Field(default=10.0, gt=0)
    default_limit: int = Field(default=9, ge=1)


class SwapiSettings(BaseModel):
    model_config = ConfigDict(extra='forbid')

    base_url: str = "https://swapi.dev/api"
    timeout: float = Field(default=5.0, gt=0, le=60)
    probe_path: str = "people/1/"
    user_agent: str = "StarWarsBrowser/1.0"


class AvailabilitySettings(BaseModel):
    model_config = ConfigDict(extra='forbid')

    check_interval: float = Field(default=60.0, ge=0)
    failure_threshold: int = Field(default=1, ge=1)


class MatchingSettings(BaseModel):
    """Name-matching policy.

    ``fallback_to_first`` controls whether an unrelated first search result is
    accepted when neither exact nor partial matching succeeds.
    ``fallback_overrides`` maps a category value to its own policy.
    """
    model_config = ConfigDict(extra='forbid')

    fallback_to_first: bool = True
    fallback_overrides: Dict[str, bool] = Field(default_factory=dict)

    def fallback_for(self, category: str) -> bool:
        return self.fallback_overrides.get(category, self.fallback_to_first)


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    level: str = "INFO"
    dir: str = "logs"
    json_files: bool = Field(default=False, alias="json")


class Settings(BaseModel):
    model_config = ConfigDict(extra='ignore')

    databank: DatabankSettings = Field(default_factory=DatabankSettings)
    swapi: SwapiSettings = Field(default_factory=SwapiSettings)
    availability: AvailabilitySettings = Field(default_factory=AvailabilitySettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """Build Settings from the YAML file and environment.

    Args:
        path: Explicit config path. Defaults to ``SWBROWSER_CONFIG`` or
            ``config/settings.yaml``.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Validated Settings instance

    Raises:
        FileNotFoundError: If an explicitly named file does not exist
        pydantic.ValidationError: If a value is out of range or a key is unknown
    """
    environ = os.environ if environ is None else environ
    explicit = path or environ.get("SWBROWSER_CONFIG")
    config_path = Path(explicit or DEFAULT_CONFIG_PATH)

    # Only the default location may be absent
    loader = ConfigLoader(config_path, required=bool(explicit))
    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            loader.set(key, value)

    return Settings.model_validate(loader.as_dict())
