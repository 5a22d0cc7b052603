from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from pathlib import Path

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # System
    LOG_LEVEL: str = "INFO"
    LOG_FILE_ENABLED: bool = True
    DATA_DIR: Path = Path("./data")

    # Run configuration and artifacts
    CONFIG_PATH: Path = Path("./config/news-sources.json")
    OUTPUT_DIR: Path = Path(".")

    # Threat intel API
    THREAT_INTEL_API_KEY: str | None = Field(
        default=None, validation_alias=AliasChoices("THREAT_INTEL_API_KEY", "VT_API_KEY")
    )
    THREAT_INTEL_BASE_URL: str = "https://www.virustotal.com/api/v3"
    THREAT_INTEL_GUI_URL: str = "https://www.virustotal.com/gui"
    THREAT_INTEL_AUTH_HEADER: str = "x-apikey"

    # HTTP
    HTTP_TIMEOUT: float = 20.0
    HTTP_RETRY_ATTEMPTS: int = 2  # Transport errors only, status errors drive fallback
    USER_AGENT: str = "SentryDigest/1.0 (+https://github.com/sentrydigest)"

    def ensure_dirs(self):
        # OUTPUT_DIR is created by the renderer, which knows the effective target
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)

settings = Settings()
