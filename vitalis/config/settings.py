"""Root settings model for Vitalis configuration."""

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from vitalis.config.loader import config_files
from vitalis.config.models.observability import ObservabilityConfig
from vitalis.config.models.observations import ObservationServiceConfig
from vitalis.config.models.storage import StorageConfig


class Settings(BaseSettings):
    """Root configuration object containing all nested configuration sections.

    Configuration is loaded in this order, later sources winning:
    1. Pydantic model defaults (in code)
    2. config/default.toml
    3. config/{VITALIS_ENV}.toml
    4. VITALIS_* environment variables, nested with `__`
    5. Constructor arguments
    """

    model_config = SettingsConfigDict(
        env_prefix="VITALIS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="vitalis", description="Application name for logging")

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Storage backend configuration",
    )
    observations: ObservationServiceConfig = Field(
        default_factory=ObservationServiceConfig,
        description="Observation service configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Put the TOML layers under environment variables.

        Each file gets its own source, highest precedence first, so that
        pydantic-settings deep-merges the tables of the environment file
        into those of default.toml.
        """
        toml_layers = [
            TomlConfigSettingsSource(settings_cls, toml_file=path)
            for path in reversed(config_files())
        ]
        return (init_settings, env_settings, *toml_layers)
