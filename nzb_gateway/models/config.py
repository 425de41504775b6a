"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

# Hosts that only make sense for binding, never inside a link
BIND_ALL_HOSTS = ("0.0.0.0", "::", "[::]")


class IndexerConfig(BaseModel):
    """Connection settings for one Newznab-compatible indexer."""

    name: str
    host: str
    api_key: str = ""

    class Config:
        """Pydantic model configuration."""

        str_strip_whitespace = True

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Ensures the indexer host is an absolute HTTP(S) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Indexer host must start with http:// or https://: {v}")
        return v.rstrip("/")


class GatewayConfig(BaseModel):
    """A validated configuration model for the application."""

    # Local address the application is reachable under
    host: str = "127.0.0.1"
    port: int = 5076
    use_ssl: bool = False
    url_base: str = ""

    # External access
    external_url: str = ""
    use_local_url_for_api_access: bool = False
    api_key: str = ""

    # Fetching
    fetch_timeout: int = 30

    indexers: list[IndexerConfig] = Field(default_factory=list)

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @field_validator("url_base")
    @classmethod
    def validate_url_base(cls, v: str) -> str:
        """Normalizes the URL base to either '' or '/prefix' without trailing slash."""
        v = v.strip("/")
        return f"/{v}" if v else ""

    @field_validator("external_url")
    @classmethod
    def validate_external_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("External URL must start with http:// or https://.")
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if v and not v.isalnum():
            raise ValueError("API key may only contain letters and digits.")
        return v

    @field_validator("fetch_timeout")
    @classmethod
    def validate_fetch_timeout(cls, v: int) -> int:
        if v < 1 or v > 300:
            raise ValueError("Fetch timeout must be between 1 and 300 seconds.")
        return v

    @property
    def base_url(self) -> str:
        """The application's own base address, e.g. 'http://127.0.0.1:5076/nzbhydra'."""
        scheme = "https" if self.use_ssl else "http"
        host = "127.0.0.1" if self.host in BIND_ALL_HOSTS else self.host
        return f"{scheme}://{host}:{self.port}{self.url_base}"

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the DEFAULT section."""
        internal_fields = {"config_path", "indexers"}
        return {key for key in cls.model_fields if key not in internal_fields}
