"""Test config loading and parsing."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from ircbridge.config import (
    DEFAULT_SERVER_CONFIG,
    Config,
    _deep_update,
    is_valid_group_id,
    load_config,
    merge_servers,
    with_server_defaults,
)
from ircbridge.core.errors import BridgeConfigurationError


def minimal_config(**server):
    return {
        "homeserver": {"domain": "example.org"},
        "ircService": {"servers": {"irc.example.net": server}},
    }


class TestDeepUpdate:
    """Test deep dictionary merge."""

    def test_deep_update_simple(self):
        # Arrange
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}

        # Act
        result = _deep_update(base, override)

        # Assert
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_deep_update_nested(self):
        # Arrange
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 99, "z": 100}}

        # Act
        result = _deep_update(base, override)

        # Assert
        assert result == {"a": {"x": 1, "y": 99, "z": 100}, "b": 3}

    def test_deep_update_preserves_base(self):
        base = {"a": 1}
        _deep_update(base, {"b": 2})
        assert base == {"a": 1}

    def test_lists_are_replaced(self):
        assert _deep_update({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


class TestLoadConfig:
    """Test config file loading."""

    def test_load_config_from_yaml(self):
        # Arrange
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("homeserver:\n")
            f.write("  domain: example.org\n")
            path = f.name

        try:
            # Act
            config = load_config(path)

            # Assert
            assert config["homeserver"]["domain"] == "example.org"
        finally:
            Path(path).unlink()

    def test_load_config_missing_file(self):
        assert load_config("/nonexistent/config.yaml") == {}

    def test_load_config_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_load_config_non_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        assert load_config(path) == {}

    def test_load_config_invalid_yaml(self, tmp_path):
        import yaml

        path = tmp_path / "config.yaml"
        path.write_text("not: a: valid: yaml:")
        with pytest.raises(yaml.YAMLError):
            load_config(path)


class TestConfig:
    """Test Config accessor class."""

    def test_config_get_nested(self):
        config = Config({"a": {"b": {"c": "value"}}})
        assert config.get("a.b.c") == "value"

    def test_config_get_default(self):
        assert Config({}).get("missing", "default") == "default"

    def test_config_getitem_and_contains(self):
        config = Config({"key": "value"})
        assert config["key"] == "value"
        assert "key" in config
        assert "missing" not in config

    def test_homeserver_domain(self, monkeypatch):
        monkeypatch.delenv("IRCBRIDGE_HOMESERVER_DOMAIN", raising=False)
        assert Config(minimal_config()).homeserver_domain == "example.org"

    def test_homeserver_domain_env_override(self, monkeypatch):
        monkeypatch.setenv("IRCBRIDGE_HOMESERVER_DOMAIN", "matrix.example.com")
        assert Config(minimal_config()).homeserver_domain == "matrix.example.com"

    def test_servers_merged_over_defaults(self):
        # Arrange
        config = Config(minimal_config(matrixClients={"displayName": "$NICK [irc]"}))

        # Act
        server = config.servers["irc.example.net"]

        # Assert
        assert server["matrixClients"]["displayName"] == "$NICK [irc]"
        assert server["matrixClients"]["userTemplate"] == "@$SERVER_$NICK"
        assert server["ircClients"]["nickTemplate"] == "M-$DISPLAY"
        assert server["dynamicChannels"]["aliasTemplate"] == "#irc_$SERVER_$CHANNEL"

    def test_servers_do_not_share_defaults(self):
        config = Config(minimal_config())
        config.servers["irc.example.net"]["dynamicChannels"]["exclude"].append("#x")
        assert DEFAULT_SERVER_CONFIG["dynamicChannels"]["exclude"] == []

    def test_non_mapping_server_skipped(self):
        config = Config({"ircService": {"servers": {"irc.example.net": "nope"}}})
        assert config.servers == {}


class TestValidate:
    def test_valid_config(self, monkeypatch):
        monkeypatch.delenv("IRCBRIDGE_HOMESERVER_DOMAIN", raising=False)
        Config().reload(minimal_config())

    def test_missing_homeserver(self, monkeypatch):
        monkeypatch.delenv("IRCBRIDGE_HOMESERVER_DOMAIN", raising=False)
        with pytest.raises(BridgeConfigurationError) as exc_info:
            Config().reload({"ircService": {"servers": {}}})
        assert exc_info.value.code == "missing_homeserver_domain"

    def test_servers_must_be_mapping(self):
        with pytest.raises(BridgeConfigurationError) as exc_info:
            Config().reload({"homeserver": {"domain": "example.org"}, "ircService": {"servers": ["a"]}})
        assert exc_info.value.code == "invalid_servers"

    def test_empty_template(self):
        with pytest.raises(BridgeConfigurationError) as exc_info:
            Config().reload(minimal_config(ircClients={"nickTemplate": ""}))
        assert exc_info.value.code == "invalid_template"
        assert exc_info.value.details["key"] == "ircClients.nickTemplate"

    def test_reload_without_validation(self):
        config = Config()
        config.reload({}, validate=False)
        assert config.raw == {}


class TestGroupId:
    @pytest.mark.parametrize("group_id", ["+group:example.org", "+a:b"])
    def test_valid(self, group_id):
        assert is_valid_group_id(group_id) is True

    @pytest.mark.parametrize(
        "group_id",
        [None, "", "   ", "group:example.org", "+group", "+gr oup:example.org", "+a:b\n", "\n+a:b", "+a:b\r"],
    )
    def test_invalid(self, group_id):
        assert is_valid_group_id(group_id) is False

    @pytest.mark.parametrize("group_id", [12, 1.5, True, ["+a:b"], {"id": "+a:b"}])
    def test_non_string_is_invalid(self, group_id):
        assert is_valid_group_id(group_id) is False


class TestMergeServers:
    """Test per-network defaults applied by the loader."""

    def test_with_server_defaults(self):
        # Arrange
        server = {"name": "Example", "ircClients": {"nickTemplate": "$DISPLAY[m]"}}

        # Act
        merged = with_server_defaults(server)

        # Assert
        assert merged["name"] == "Example"
        assert merged["ircClients"]["nickTemplate"] == "$DISPLAY[m]"
        assert merged["matrixClients"]["userTemplate"] == DEFAULT_SERVER_CONFIG["matrixClients"]["userTemplate"]
        assert "name" not in DEFAULT_SERVER_CONFIG

    def test_skips_non_mapping_entries(self):
        with patch("ircbridge.config.loader.logger") as mock_logger:
            merged = merge_servers({"irc.example.net": {}, "irc.bad.net": ["x"], "irc.none.net": None})
        assert list(merged) == ["irc.example.net"]
        assert mock_logger.warning.call_count == 2

    def test_keys_are_strings(self):
        assert list(merge_servers({6667: {}})) == ["6667"]

    @pytest.mark.parametrize("raw", [None, [], "irc.example.net"])
    def test_non_mapping_raw_is_empty(self, raw):
        assert merge_servers(raw) == {}

    def test_config_servers_uses_loader_merge(self):
        config = Config(minimal_config(name="Example"))
        assert config.servers == merge_servers(config.get("ircService.servers"))
