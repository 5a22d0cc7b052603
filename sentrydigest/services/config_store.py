import json
from pathlib import Path
from pydantic import ValidationError
from sentrydigest.feeds_config import DEFAULT_MAX_ITEMS, DEFAULT_SOURCES
from sentrydigest.models.items import utc_now
from sentrydigest.models.sources import RunConfig, SelectionConfig
from sentrydigest.services.logger import logger

class ConfigError(Exception):
    """The run configuration file cannot be used at all."""

def default_config() -> RunConfig:
    return RunConfig.model_validate({
        "sources": DEFAULT_SOURCES,
        "settings": {"maxItems": DEFAULT_MAX_ITEMS, "lastUpdated": utc_now().isoformat()},
    })

class ConfigStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> RunConfig:
        if not self.path.exists():
            logger.info(f"No configuration found at {self.path}, creating default config")
            config = default_config()
            self.save(config)
            return config

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            config = RunConfig.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration {self.path}: {e}") from e

        logger.info(f"Loaded configuration with {len(config.sources)} sources")
        return config

    def save(self, config: RunConfig):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def touch(self, config: RunConfig) -> RunConfig:
        """Stamp settings.lastUpdated with the current time and persist."""
        stamped: SelectionConfig = config.settings.model_copy(update={"last_updated": utc_now().isoformat()})
        config = config.model_copy(update={"settings": stamped})
        self.save(config)
        logger.info("Updated config file with timestamp")
        return config
