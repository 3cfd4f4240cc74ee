"""Tests for named networks and network config yaml loading."""

import pytest

from validator_tools.exceptions import ConfigError, UnknownNetworkError
from validator_tools.spec import get_network_config, load_network_config
from validator_tools.spec.constants import DOMAIN_VOLUNTARY_EXIT


@pytest.mark.parametrize("name,capella", [
    ("mainnet", "03000000"),
    ("holesky", "04017000"),
    ("hoodi", "40000910"),
])
def test_builtin_networks(name, capella):
    config = get_network_config(name)
    assert config.config_name == name
    assert config.capella_fork_version.hex() == capella
    assert config.slots_per_epoch == 32
    assert config.shard_committee_period == 256
    assert config.domain_voluntary_exit == DOMAIN_VOLUNTARY_EXIT
    assert len(config.genesis_validators_root) == 32


def test_unknown_network():
    with pytest.raises(UnknownNetworkError, match="unknown network: goerli"):
        get_network_config("goerli")


def test_load_network_config_by_name():
    assert load_network_config("holesky") is get_network_config("holesky")


def test_load_network_config_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "CONFIG_NAME: 'devnet-7'\n"
        "GENESIS_FORK_VERSION: '0x10000038'\n"
        "CAPELLA_FORK_VERSION: 0x40000038\n"
        "GENESIS_VALIDATORS_ROOT: '0x" + "ab" * 32 + "'\n"
        "SHARD_COMMITTEE_PERIOD: 4\n"
        "SOME_UNRELATED_KEY: 12\n"
    )

    config = load_network_config(str(path))

    assert config.config_name == "devnet-7"
    assert config.capella_fork_version == bytes.fromhex("40000038")
    assert config.genesis_validators_root == bytes.fromhex("ab" * 32)
    assert config.shard_committee_period == 4


def test_load_network_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_network_config(str(tmp_path / "missing.yaml"))


def test_load_network_config_not_a_mapping(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="not a mapping"):
        load_network_config(str(path))
