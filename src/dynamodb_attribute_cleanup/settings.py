from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dynamodb_attribute_cleanup.errors import ConfigInvalidError
from dynamodb_attribute_cleanup.models import CleanupConfig, TableIdentity

# DynamoDB caps batch writes at 25 items; concurrency per batch follows it.
MAX_BATCH_SIZE = 25


def split_field_names(raw: str) -> tuple[str, ...]:
    names: list[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    table_name: str = Field(alias="DYNAMODB_TABLE_NAME")
    partition_key: str = Field(alias="DYNAMODB_PARTITION_KEY")
    sort_key: str | None = Field(default=None, alias="DYNAMODB_SORT_KEY")
    attributes_to_remove: str = Field(alias="ATTRIBUTES_TO_REMOVE")
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    batch_size: int = Field(default=MAX_BATCH_SIZE, alias="BATCH_SIZE")
    max_retries: int = Field(default=5, alias="MAX_RETRIES")
    initial_delay_ms: int = Field(default=100, alias="INITIAL_DELAY")

    @field_validator("table_name", "partition_key")
    @classmethod
    def _validate_required_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("DYNAMODB_TABLE_NAME and DYNAMODB_PARTITION_KEY must not be blank")
        return value

    @field_validator("sort_key")
    @classmethod
    def _normalize_sort_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("attributes_to_remove")
    @classmethod
    def _validate_attributes(cls, value: str) -> str:
        if not split_field_names(value):
            raise ValueError("ATTRIBUTES_TO_REMOVE must list at least one attribute (comma-separated)")
        return value

    @field_validator("batch_size")
    @classmethod
    def _validate_batch_size(cls, value: int) -> int:
        if value < 1 or value > MAX_BATCH_SIZE:
            raise ValueError(f"BATCH_SIZE must be between 1 and {MAX_BATCH_SIZE}")
        return value

    @field_validator("max_retries")
    @classmethod
    def _validate_max_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("MAX_RETRIES must be >= 0")
        return value

    @field_validator("initial_delay_ms")
    @classmethod
    def _validate_initial_delay(cls, value: int) -> int:
        if value < 1:
            raise ValueError("INITIAL_DELAY must be > 0")
        return value

    @model_validator(mode="after")
    def _validate_key_fields(self) -> Settings:
        if self.sort_key is not None and self.sort_key == self.partition_key:
            raise ValueError("DYNAMODB_SORT_KEY must differ from DYNAMODB_PARTITION_KEY")
        return self

    @property
    def fields_to_remove(self) -> tuple[str, ...]:
        return split_field_names(self.attributes_to_remove)

    def to_cleanup_config(self) -> CleanupConfig:
        return CleanupConfig(
            table_name=self.table_name,
            identity=TableIdentity(partition_key=self.partition_key, sort_key=self.sort_key),
            fields_to_remove=self.fields_to_remove,
            batch_size=self.batch_size,
            max_retries=self.max_retries,
            initial_delay_ms=self.initial_delay_ms,
        )


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigInvalidError(str(exc)) from exc


def load_config(settings: Settings | None = None) -> CleanupConfig:
    if settings is None:
        settings = load_settings()
    try:
        return settings.to_cleanup_config()
    except ValidationError as exc:
        raise ConfigInvalidError(str(exc)) from exc
