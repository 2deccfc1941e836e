"""Unit tests for ctph/user_config.py: persistent config management."""
import json
import os
import pytest

from ctph.hashing import FuzzyHashMode
from ctph.user_config import (
    load_user_config,
    save_user_config,
    get_config_value,
    set_config_value,
    delete_config_value,
    get_config_view,
    get_bool_setting,
    get_int_setting,
    resolve_hash_mode,
    _ENV_VAR_MAP,
)


# ---------------------------------------------------------------------------
# load_user_config
# ---------------------------------------------------------------------------

class TestLoadUserConfig:
    def test_missing_file_returns_empty(self, config_dir):
        assert load_user_config() == {}

    def test_valid_json(self, config_dir):
        cfg_dir, cfg_file = config_dir
        cfg_file.write_text(json.dumps({"key": "value"}))
        assert load_user_config() == {"key": "value"}

    def test_invalid_json_returns_empty(self, config_dir):
        cfg_dir, cfg_file = config_dir
        cfg_file.write_text("not valid json {{{")
        assert load_user_config() == {}

    def test_non_dict_json_returns_empty(self, config_dir):
        cfg_dir, cfg_file = config_dir
        cfg_file.write_text(json.dumps(["a", "list"]))
        assert load_user_config() == {}


# ---------------------------------------------------------------------------
# save / set / delete
# ---------------------------------------------------------------------------

class TestSaveUserConfig:
    def test_roundtrip(self, config_dir):
        save_user_config({"match_threshold": 40})
        assert load_user_config() == {"match_threshold": 40}

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
    def test_file_permissions(self, config_dir):
        cfg_dir, cfg_file = config_dir
        save_user_config({"a": 1})
        assert (cfg_file.stat().st_mode & 0o777) == 0o600

    def test_set_and_delete(self, config_dir):
        set_config_value("match_threshold", "30")
        assert get_config_value("match_threshold") == "30"
        assert delete_config_value("match_threshold") is True
        assert delete_config_value("match_threshold") is False
        assert get_config_value("match_threshold") is None


# ---------------------------------------------------------------------------
# Resolution order and typed settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_env_overrides_file(self, config_dir, monkeypatch):
        set_config_value("match_threshold", "30")
        monkeypatch.setenv(_ENV_VAR_MAP["match_threshold"], "55")
        assert get_config_value("match_threshold") == "55"
        assert get_int_setting("match_threshold") == 55

    def test_defaults(self, config_dir):
        assert get_bool_setting("eliminate_sequences") is True
        assert get_bool_setting("do_not_truncate") is False
        assert get_int_setting("match_threshold") == 0

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("off", False), ("0", False),
    ])
    def test_bool_parsing(self, config_dir, raw, expected):
        set_config_value("do_not_truncate", raw)
        assert get_bool_setting("do_not_truncate") is expected

    def test_json_bool_values(self, config_dir):
        save_user_config({"eliminate_sequences": False})
        assert get_bool_setting("eliminate_sequences") is False

    def test_bad_values_fall_back(self, config_dir):
        save_user_config({"do_not_truncate": "maybe", "match_threshold": "lots"})
        assert get_bool_setting("do_not_truncate") is False
        assert get_int_setting("match_threshold") == 0

    def test_resolve_hash_mode(self, config_dir):
        assert resolve_hash_mode() == FuzzyHashMode.NONE
        set_config_value("do_not_truncate", "true")
        assert resolve_hash_mode() & FuzzyHashMode.DO_NOT_TRUNCATE


class TestConfigView:
    def test_lists_values_and_env_overrides(self, config_dir, monkeypatch):
        set_config_value("match_threshold", "30")
        monkeypatch.setenv("CTPH_DO_NOT_TRUNCATE", "1")
        view = get_config_view()
        assert view["match_threshold"] == "30"
        assert "do_not_truncate" in view["_env_overrides"]

    def test_no_overrides_key_without_env(self, config_dir):
        save_user_config({"eliminate_sequences": False})
        assert get_config_view() == {"eliminate_sequences": False}
