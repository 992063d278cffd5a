"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Conversion settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="GRIDMESH_", extra="ignore"
    )

    # Flood-fill boundary policy
    has_outside: bool = Field(
        default=False,
        description="Treat the area outside the map as traversable",
    )

    # Output files
    poly_suffix: str = Field(default=".poly", description="Polygon file suffix")
    mesh_suffix: str = Field(default=".cdt", description="Mesh file suffix")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console", description="Logging format (console or json)"
    )


settings = Settings()
