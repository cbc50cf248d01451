"""Configuration management for the throttle relay."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class StoreConfig(BaseModel):
    """Key-value store (DynamoDB) configuration."""
    table_name: str = "demo-devops-agent-table"
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None


class WriterConfig(BaseModel):
    """Write-and-classify driver configuration."""
    write_count: int = 50
    item_data_size: int = 900  # ~1KB per item once keys are added
    schedule_interval_seconds: int = 60  # 0 disables the in-process schedule


class WebhookConfig(BaseModel):
    """Incident webhook configuration."""
    enabled: bool = False
    url: str = ""
    secret: str = ""
    service_name: str = "DemoDevOpsAgent"
    environment: str = "production"
    affected_resources: List[str] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"


class ServerSettings(BaseModel):
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 1


class Settings(BaseSettings):
    """Main application settings."""

    # Server
    server: ServerSettings = Field(default_factory=ServerSettings)

    # Store
    store: StoreConfig = Field(default_factory=StoreConfig)

    # Writer
    writer: WriterConfig = Field(default_factory=WriterConfig)

    # Webhook
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        env_prefix = "THROTTLE_RELAY_"
        env_nested_delimiter = "__"


def load_yaml_config(path: str) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    path = Path(path).expanduser()
    if not path.exists():
        return {}

    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _env_flag(value: str) -> bool:
    return value.strip().lower() == "true"


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from configuration file and environment variables.

    Priority (highest to lowest):
    1. Plain function environment variables (TABLE_NAME, WEBHOOK_URL, ...)
    2. THROTTLE_RELAY_* environment variables
    3. Config file
    4. Default values
    """
    if config_path is None:
        config_path = os.environ.get(
            "THROTTLE_RELAY_CONFIG_PATH",
            "config/config.yaml"
        )

    yaml_config = load_yaml_config(config_path)

    settings_dict = {}

    if "server" in yaml_config:
        settings_dict["server"] = ServerSettings(**yaml_config["server"])

    if "store" in yaml_config:
        settings_dict["store"] = StoreConfig(**yaml_config["store"])

    if "writer" in yaml_config:
        settings_dict["writer"] = WriterConfig(**yaml_config["writer"])

    if "webhook" in yaml_config:
        settings_dict["webhook"] = WebhookConfig(**yaml_config["webhook"])

    if "logging" in yaml_config:
        settings_dict["logging"] = LoggingConfig(**yaml_config["logging"])

    # Create settings (prefixed environment variables will override)
    settings = Settings(**settings_dict)

    # Override from the environment the deployed functions are given
    table_name = os.environ.get("TABLE_NAME", "")
    if table_name:
        settings.store.table_name = table_name

    region = os.environ.get("AWS_REGION", "")
    if region:
        settings.store.region = region

    write_count = os.environ.get("WRITE_COUNT", "")
    if write_count:
        settings.writer.write_count = int(write_count)

    webhook_enabled = os.environ.get("WEBHOOK_ENABLED")
    if webhook_enabled is not None:
        settings.webhook.enabled = _env_flag(webhook_enabled)

    webhook_url = os.environ.get("WEBHOOK_URL", "")
    if webhook_url:
        settings.webhook.url = webhook_url

    webhook_secret = os.environ.get("WEBHOOK_SECRET", "")
    if webhook_secret:
        settings.webhook.secret = webhook_secret

    service_name = os.environ.get("SERVICE_NAME", "")
    if service_name:
        settings.webhook.service_name = service_name

    return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (for testing)."""
    global _settings
    _settings = None
