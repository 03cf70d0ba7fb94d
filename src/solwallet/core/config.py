"""Configuration management for SolWallet."""

from __future__ import annotations

import os
import tomllib
from copy import deepcopy
from pathlib import Path
from typing import Any, Literal

import tomli_w
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from solwallet.core.errors import SolWalletError

DEFAULT_CONFIG_DIR = Path(os.environ.get("SOLWALLET_HOME", Path.home() / ".solwallet"))
CONFIG_FILENAME = "config.toml"


class ConfigurationError(SolWalletError):
    """Raised when configuration loading fails."""


class WalletConfig(BaseModel):
    """Persisted SolWallet configuration settings."""

    config_version: int = 1
    network: str = "devnet"
    commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"
    rpc_timeout: float = Field(default=10.0, gt=0)
    confirm_timeout_secs: float = Field(default=60.0, gt=0)
    confirm_poll_interval: float = Field(default=0.5, gt=0)
    balance_poll_interval_secs: float = Field(default=30.0, gt=0)
    history_limit: int = Field(default=10, ge=1, le=1000)
    explorer_base_url: str = "https://explorer.solana.com"
    # Optional fast-fail: stop a batch when the endpoint becomes unreachable
    stop_batch_on_network_error: bool = False


class ConfigManager:
    """Handles loading and persisting SolWallet configuration."""

    def __init__(
        self,
        config_dir: Path | None = None,
        project_config_path: Path | None = None,
        override_config_path: Path | None = None,
    ) -> None:
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path = self.config_dir / CONFIG_FILENAME
        self.project_config_path = project_config_path
        self.override_config_path = override_config_path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load(self) -> WalletConfig:
        """Return the merged configuration, writing defaults on first run."""
        if not self.config_path.exists():
            self._save_config(WalletConfig())
        data: dict[str, Any] = self._read_config_dict(self.config_path)
        if self.project_config_path:
            data = self._merge_dicts(data, self._read_config_dict(self.project_config_path))
        if self.override_config_path:
            data = self._merge_dicts(data, self._read_config_dict(self.override_config_path))
        try:
            return WalletConfig(**data)
        except PydanticValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def update(self, **updates: object) -> WalletConfig:
        """Persist `updates` into the base config file and return the merged result."""
        current = self._read_config_dict(self.config_path)
        current = current.copy() if current else {}
        current.update({key: value for key, value in updates.items() if value is not None})
        try:
            base_config = WalletConfig(**current)
        except PydanticValidationError as exc:
            raise ConfigurationError(str(exc)) from exc
        self._save_config(base_config)
        return self.load()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _save_config(self, config: WalletConfig) -> None:
        self.config_path.write_text(tomli_w.dumps(config.model_dump(exclude_none=True)))

    def _read_config_dict(self, path: Path | None) -> dict[str, Any]:
        if path is None:
            return {}
        if not path.exists():
            return {}
        try:
            return tomllib.loads(path.read_text())
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result


__all__ = ["ConfigManager", "WalletConfig", "ConfigurationError", "DEFAULT_CONFIG_DIR", "CONFIG_FILENAME"]
