from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectorBaseSettings(BaseSettings):
    """Base class for every dbconnect settings group.

    Each domain group narrows ``env_prefix`` so that its fields are read
    from a namespaced set of environment variables, for example
    ``DBCONNECT_STORE_BACKEND`` or ``DBCONNECT_ENGINE_POOL_SIZE``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )
