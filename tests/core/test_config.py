from pathlib import Path
from typing import Any

import pytest
import tomli_w
import tomllib

from solwallet.core.config import CONFIG_FILENAME, ConfigManager, ConfigurationError, WalletConfig


def make_manager(tmp_path: Path, **kwargs: Any) -> ConfigManager:
    return ConfigManager(config_dir=tmp_path, **kwargs)


def test_first_load_writes_defaults(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)

    config = manager.load()

    assert config == WalletConfig()
    assert config.network == "devnet"
    assert config.commitment == "confirmed"
    assert config.stop_batch_on_network_error is False
    stored = tomllib.loads((tmp_path / CONFIG_FILENAME).read_text())
    assert stored["history_limit"] == 10


def test_project_and_override_files_merge_in_order(tmp_path: Path) -> None:
    project = tmp_path / "project.toml"
    project.write_text(tomli_w.dumps({"network": "testnet", "history_limit": 25}))
    override = tmp_path / "override.toml"
    override.write_text(tomli_w.dumps({"network": "mainnet-beta"}))

    config = make_manager(tmp_path / "home", project_config_path=project, override_config_path=override).load()

    assert config.network == "mainnet-beta"
    assert config.history_limit == 25


def test_update_persists_and_skips_none(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)
    manager.load()

    config = manager.update(network="https://rpc.example", commitment=None)

    assert config.network == "https://rpc.example"
    assert config.commitment == "confirmed"
    assert make_manager(tmp_path).load().network == "https://rpc.example"


def test_invalid_values_raise_configuration_error(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)
    manager.load()

    with pytest.raises(ConfigurationError):
        manager.update(commitment="eventually")
    with pytest.raises(ConfigurationError):
        manager.update(rpc_timeout=0)
    assert manager.load().commitment == "confirmed"


def test_corrupt_toml_raises_configuration_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("network = [unterminated")

    with pytest.raises(ConfigurationError):
        make_manager(tmp_path).load()
