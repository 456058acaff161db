"""Settings for the producer."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from producer.app.constants import DEFAULT_QUEUE_NAME


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    broker_host: str = Field("localhost", validation_alias="BROKER_HOST")
    broker_port: int = Field(5672, validation_alias="BROKER_PORT")
    broker_user: str = Field("guest", validation_alias="BROKER_USER")
    broker_password: str = Field("guest", validation_alias="BROKER_PASSWORD")
    broker_vhost: str = Field("/", validation_alias="BROKER_VHOST")

    # Destination queue; also the routing key on the default exchange.
    queue_name: str = Field(DEFAULT_QUEUE_NAME, validation_alias="QUEUE_NAME")

    broker_backend: str = Field("rabbitmq", validation_alias="BROKER_BACKEND")

    initial_backoff_seconds: float = Field(1.0, validation_alias="INITIAL_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(30.0, validation_alias="MAX_BACKOFF_SECONDS")
    backoff_multiplier: float = Field(2.0, validation_alias="BACKOFF_MULTIPLIER")
    max_connection_attempts: int = Field(5, validation_alias="MAX_CONNECTION_ATTEMPTS")

    readiness_timeout_seconds: float = Field(5.0, validation_alias="READINESS_TIMEOUT_SECONDS")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(False, validation_alias="LOG_JSON")

    http_host: str = Field("0.0.0.0", validation_alias="HTTP_HOST")
    http_port: int = Field(8000, validation_alias="HTTP_PORT")
