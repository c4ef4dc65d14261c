"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    CACHE_FRESH_SECONDS,
    CACHE_MAX_AGE_SECONDS,
    COINGECKO_LINEA_ID,
    COINGECKO_SIMPLE_PRICE_URL,
    DEFAULT_LINEA_RPC_URL,
    ETH_USD_PRICE_FEED,
    LINEA_TOTAL_SUPPLY,
    MULTICALL3_ADDRESS,
    REFRESH_INTERVAL_SECONDS,
    REWARDS_FEED_URL,
)

load_dotenv()

SECRET_FIELDS = frozenset({"spot_price_api_key"})


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def default_cache_path() -> Path:
    return Path.home() / ".cache" / "linea-markets" / "markets.json"


class DashboardSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with LINEA_MARKETS_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- chain access ---
    rpc_url: str = DEFAULT_LINEA_RPC_URL
    rpc_timeout: float = Field(default=15.0, gt=0)
    block_number: int | None = None
    multicall_address: str = MULTICALL3_ADDRESS
    price_feed_address: str = ETH_USD_PRICE_FEED

    # --- reward feed ---
    rewards_url: str = REWARDS_FEED_URL
    rewards_timeout: float = Field(default=10.0, gt=0)

    # --- reward token spot price ---
    spot_price_enabled: bool = True
    spot_price_url: str = COINGECKO_SIMPLE_PRICE_URL
    spot_price_token_id: str = COINGECKO_LINEA_ID
    spot_price_api_key: SecretStr | None = None
    spot_price_timeout: float = Field(default=10.0, gt=0)
    spot_price_retries: int = Field(default=3, ge=1)

    # --- cache and polling ---
    cache_path: Path = Field(default_factory=default_cache_path)
    cache_fresh_seconds: int = Field(default=CACHE_FRESH_SECONDS, gt=0)
    cache_max_age_seconds: int = Field(default=CACHE_MAX_AGE_SECONDS, gt=0)
    refresh_interval_seconds: int = Field(default=REFRESH_INTERVAL_SECONDS, gt=0)

    # --- profit calculator inputs ---
    deposit_usd: float = Field(default=0.0, ge=0)
    token_price_usd: float | None = Field(
        default=None,
        ge=0,
        description="Manual reward token price; overrides the spot price feed.",
    )
    token_total_supply: int = Field(default=LINEA_TOTAL_SUPPLY, gt=0)

    # --- output ---
    output_format: OutputFormat = OutputFormat.TABLE

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LINEA_MARKETS_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("spot_price_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def validate_cache_thresholds(self) -> "DashboardSettings":
        """Validate that the fresh window ends before the maximum cache age."""
        if self.cache_fresh_seconds >= self.cache_max_age_seconds:
            raise ValueError(
                f"cache_fresh_seconds ({self.cache_fresh_seconds}) "
                f"must be less than cache_max_age_seconds ({self.cache_max_age_seconds})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("LINEA_MARKETS_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("linea-markets.toml")
                    user_config = (
                        Path.home() / ".config" / "linea-markets" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [linea_markets]
                body = data.get("linea_markets", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-ready dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key) is not None:
                data[key] = "***redacted***"
        return data

    @property
    def block_identifier(self) -> int | str:
        """Block to read at: the pinned block number, or ``latest``."""
        return self.block_number if self.block_number is not None else "latest"
