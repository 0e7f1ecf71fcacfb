"""Configuration management with Pydantic settings."""

import os
from typing import List, Dict
from pydantic import BaseModel, Field, field_validator, model_validator
import yaml


class DatabaseConfig(BaseModel):
    """Database configuration."""
    url: str = "sqlite+aiosqlite:///./data/uptime.db"
    echo: bool = False
    busy_timeout_ms: int = 5000

    @field_validator('busy_timeout_ms')
    @classmethod
    def busy_timeout_must_be_non_negative(cls, v):
        if v < 0:
            raise ValueError('busy_timeout_ms must be non-negative')
        return v


class WorkerConfig(BaseModel):
    """Background sweep worker settings."""
    enabled: bool = True
    sweep_interval_seconds: float = 5.0
    load_backoff_seconds: float = 5.0
    probe_timeout_seconds: float = 10.0
    max_concurrent_probes: int = 1

    @field_validator('sweep_interval_seconds', 'load_backoff_seconds')
    @classmethod
    def delay_must_be_non_negative(cls, v, info):
        if v < 0:
            raise ValueError(f'{info.field_name} must be non-negative')
        return v

    @field_validator('probe_timeout_seconds')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('probe_timeout_seconds must be positive')
        return v

    @field_validator('max_concurrent_probes')
    @classmethod
    def max_concurrent_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_concurrent_probes must be at least 1')
        return v


class ChecksConfig(BaseModel):
    """Rules applied when checks are registered."""
    min_interval_seconds: int = 10


class TelegramConfig(BaseModel):
    """Telegram notification configuration."""
    bot_token: str = ""
    chat_id: str = ""
    parse_mode: str = ""
    api_base: str = "https://api.telegram.org"
    timeout: int = 10

    @property
    def configured(self) -> bool:
        """Alerts go out only when both credentials are present."""
        return bool(self.bot_token and self.chat_id)


class WebhookConfig(BaseModel):
    """Webhook notification configuration."""
    url: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: int = 10

    @property
    def configured(self) -> bool:
        return bool(self.url)


class EmailConfig(BaseModel):
    """Email notification configuration."""
    enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_use_tls: bool = False
    smtp_starttls: bool = True
    smtp_user: str = ""
    smtp_password: str = ""
    from_addr: str = ""
    to_addrs: List[str] = Field(default_factory=list)
    subject_template: str = "Uptime Alert: {check_name} is {new_status}"

    @field_validator('smtp_port')
    @classmethod
    def smtp_port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('SMTP port must be between 1 and 65535')
        return v

    @model_validator(mode='after')
    def from_addr_required_if_enabled(self):
        if self.enabled and not self.from_addr:
            raise ValueError('from_addr must be set when email notifications are enabled')
        return self

    @property
    def configured(self) -> bool:
        return self.enabled


class NotificationsConfig(BaseModel):
    """Notifications configuration."""
    enabled: bool = True
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: str = ""
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def log_format_must_be_known(cls, v):
        if v not in ('json', 'text'):
            raise ValueError('log format must be "json" or "text"')
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = True
    path: str = "/metrics"


class CORSConfig(BaseModel):
    """CORS configuration."""
    enabled: bool = False
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class APIConfig(BaseModel):
    """API server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    api: APIConfig = Field(default_factory=APIConfig)


# Environment variable -> (config path, converter)
ENV_OVERRIDES = {
    "DATABASE_URL": (("database", "url"), str),
    "LOG_LEVEL": (("logging", "level"), str),
    "TELEGRAM_BOT_TOKEN": (("notifications", "telegram", "bot_token"), str),
    "TELEGRAM_CHAT_ID": (("notifications", "telegram", "chat_id"), str),
    "ALERT_WEBHOOK_URL": (("notifications", "webhook", "url"), str),
    "SWEEP_INTERVAL_SECONDS": (("worker", "sweep_interval_seconds"), float),
    "PROBE_TIMEOUT_SECONDS": (("worker", "probe_timeout_seconds"), float),
    "API_PORT": (("api", "port"), int),
}


def _load_env_file(path: str = ".env") -> None:
    """Copy KEY=VALUE lines from a dotenv file into the environment."""
    if not os.path.exists(path):
        return
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def _apply_env_overrides(config_data: dict) -> dict:
    """Merge environment overrides into raw config data before validation."""
    for env_name, (path, convert) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ValueError(f"Invalid numeric environment override {env_name}={raw!r}: {e}")

        section = config_data
        for key in path[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[path[-1]] = value

    return config_data


def load_config() -> Config:
    """
    Load configuration from YAML file and environment variables.

    Environment overrides are merged before validation, so they are held
    to the same rules as values from the file.

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If config file, an override or the resulting configuration is invalid
    """
    _load_env_file(".env")

    app_env = os.getenv("APP_ENV", "development")
    config_path = os.getenv("CONFIG_PATH", "config/config.yaml")

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config_data = _apply_env_overrides(config_data)

    try:
        return Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
