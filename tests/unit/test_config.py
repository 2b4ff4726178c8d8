"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py and census_cli/config.py
"""
import pytest

from census_cli.config import get_default_config_template, load_config
from census_cli.main import EXIT_RUNTIME_ERROR, main
from core.config import RuntimeConfig
from core.schemas.errors import ConfigurationException


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.subgraph.url is None
        assert config.rpc.url is None
        assert config.http.timeout == 30.0
        assert config.reconstruction.page_size == 1000
        assert config.reconstruction.skip_noop_events is False
        assert config.log_level == "WARNING"

    def test_invalid_page_size(self):
        with pytest.raises(ConfigurationException, match="page_size"):
            RuntimeConfig.from_dict({"reconstruction": {"page_size": 0}})


class TestFromEnv:
    """Tests for CENSUS_* environment variables."""

    def test_all_variables(self, monkeypatch):
        monkeypatch.setenv("CENSUS_SUBGRAPH_URL", "https://sg.example")
        monkeypatch.setenv("CENSUS_RPC_URL", "https://rpc.example")
        monkeypatch.setenv("CENSUS_CONTRACT_ADDRESS", "0xabc")
        monkeypatch.setenv("CENSUS_PAGE_SIZE", "250")
        monkeypatch.setenv("CENSUS_HTTP_TIMEOUT", "5.5")
        monkeypatch.setenv("CENSUS_SKIP_NOOP_EVENTS", "true")
        monkeypatch.setenv("CENSUS_HTTP_PROXY", "http://proxy:8080")
        monkeypatch.setenv("CENSUS_LOG_LEVEL", "debug")

        config = RuntimeConfig.from_env()

        assert config.subgraph.url == "https://sg.example"
        assert config.rpc.url == "https://rpc.example"
        assert config.rpc.contract_address == "0xabc"
        assert config.reconstruction.page_size == 250
        assert config.http.timeout == 5.5
        assert config.reconstruction.skip_noop_events is True
        assert config.http.proxy == "http://proxy:8080"
        assert config.log_level == "DEBUG"

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("CENSUS_PAGE_SIZE", "lots")
        with pytest.raises(ConfigurationException, match="CENSUS_PAGE_SIZE"):
            RuntimeConfig.from_env()


class TestFromYaml:
    """Tests for YAML loading and layering."""

    def test_template_loads(self, tmp_path):
        path = tmp_path / "census.yaml"
        path.write_text(get_default_config_template())
        config = RuntimeConfig.from_yaml(path)
        assert config.reconstruction.page_size == 1000
        assert config.rpc.contract_address == "0x0000000000000000000000000000000000000000"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "census.yaml"
        path.write_text("subgraph:\n  url: https://sg.example\n")
        config = RuntimeConfig.from_yaml(path)
        assert config.subgraph.url == "https://sg.example"
        assert config.http.timeout == 30.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "census.yaml"
        path.write_text("- subgraph\n- rpc\n")
        with pytest.raises(ConfigurationException, match="must be a mapping"):
            RuntimeConfig.from_yaml(path)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationException, match="subgraph"):
            RuntimeConfig.from_dict({"subgraph": {"endpoint": "x"}})

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "census.yaml"
        path.write_text("subgraph:\n  url: https://file.example\nreconstruction:\n  page_size: 10\n")
        monkeypatch.setenv("CENSUS_SUBGRAPH_URL", "https://env.example")

        config = RuntimeConfig.from_yaml(path).with_env_overrides()

        assert config.subgraph.url == "https://env.example"
        assert config.reconstruction.page_size == 10

    def test_env_page_size_validated(self, monkeypatch):
        monkeypatch.setenv("CENSUS_PAGE_SIZE", "0")
        with pytest.raises(ConfigurationException, match="page_size"):
            RuntimeConfig().with_env_overrides()

    def test_round_trip_dict(self):
        config = RuntimeConfig.from_dict({"rpc": {"url": "https://rpc.example"}, "log_level": "info"})
        assert RuntimeConfig.from_dict(config.to_dict()) == config


class TestCliLayering:
    """Tests for flag > env > file precedence."""

    def test_flags_override_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CENSUS_RPC_URL", "https://env.example")
        config = load_config(rpc_url="https://flag.example")
        assert config.rpc.url == "https://flag.example"

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "census.yaml").write_text("rpc:\n  contract_address: '0xfeed'\n")
        assert load_config().rpc.contract_address == "0xfeed"

    def test_require(self):
        config = RuntimeConfig()
        with pytest.raises(ConfigurationException, match="rpc.url") as exc_info:
            config.require("rpc.url")
        assert exc_info.value.details["setting"] == "rpc.url"

    def test_cli_reports_non_mapping_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        assert main(["--config", str(path), "leaf", "unpack", "1"]) == EXIT_RUNTIME_ERROR
        assert "must be a mapping" in capsys.readouterr().err
