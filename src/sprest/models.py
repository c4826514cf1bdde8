"""Canonical Pydantic models shared across all sprest modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`AuthConfig`, :class:`RequestConfig`, :class:`OutputConfig`,
    :class:`CacheConfig`, :class:`GlobalConfig`, and :class:`Profile`.

**Payload models** -- produced while reading remote data or caching it:
    :class:`ConfigurationEntry` and :class:`CacheRecord`.

All models use Pydantic v2. :class:`AuthConfig` and :class:`Profile` accept
unknown keys (``extra="allow"``) so that hand-edited profile files keep
fields this version does not know about.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Auth Config ---


class AuthConfig(BaseModel):
    """Authentication configuration embedded in a :class:`Profile`.

    The ``type`` field selects the strategy registered with
    :class:`~sprest.auth.manager.AuthManager` (``bearer`` or ``basic``
    out of the box); ``source`` tells the strategy where to read the
    secret from.

    Example::

        AuthConfig(type="bearer", source="env:SP_ACCESS_TOKEN")
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Auth type: bearer, basic")
    source: str = Field(
        default="prompt",
        description="Credential source: env:VAR, file:/path, prompt",
    )


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every call made with a profile."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")
    use_digest: bool = Field(
        default=True,
        description="Fetch and send an X-RequestDigest header on POST requests",
    )
    odata: str = Field(
        default="verbose",
        description="OData metadata level requested: verbose, minimalmetadata, nometadata",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class CacheConfig(BaseModel):
    """Configuration cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable configuration caching")
    ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")
    persistent: bool = Field(
        default=False,
        description="Keep cached configuration on disk between CLI runs",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/sprest/config.json``.

    Loaded and saved by :func:`~sprest.config.load_global_config` and
    :func:`~sprest.config.save_global_config`. See
    :func:`~sprest.config.resolve_config` for the precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


class Profile(BaseModel):
    """Per-site connection profile stored under the ``profiles/`` config directory.

    A profile names one SharePoint site (``site_url``) and bundles the
    authentication and request settings needed to talk to it, plus the
    title of the list that holds configuration values.

    See Also:
        :func:`~sprest.config.load_profile`: Deserialise a profile by name.
        :func:`~sprest.config.save_profile`: Persist a profile to disk.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    site_url: str = Field(description="Absolute URL of the site, e.g. https://contoso.sharepoint.com/sites/dev")
    auth: Optional[AuthConfig] = None
    request: RequestConfig = Field(default_factory=RequestConfig)
    config_list: str = Field(
        default="config", description="Title of the list holding Title/Value settings"
    )

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


# --- Payload Models ---


class ConfigurationEntry(BaseModel):
    """One row of a configuration list: its ``Title`` column and ``Value`` column."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(alias="Title", min_length=1)
    value: str = Field(default="", alias="Value")

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value


class CacheRecord(BaseModel):
    """A cached configuration mapping plus its absolute expiration time.

    Records are created on the first cache miss and replaced wholesale once
    they expire; they are never partially updated.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    value: dict[str, str]
    expiration: float = Field(description="Absolute expiry as epoch seconds")

    def is_expired(self, now: float) -> bool:
        return now >= self.expiration
