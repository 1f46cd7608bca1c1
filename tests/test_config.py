"""Tests for configuration loading."""
import os
from pathlib import Path

import pytest

from zettel_cli.config import IdPrecision, ZettelConfig, load_config, user_env_path
from zettel_cli.exceptions import ConfigurationError, ErrorCode


class TestZettelConfig:
    """Tests for defaults and environment overrides."""

    def test_defaults(self):
        config = ZettelConfig()
        assert config.notes_dir == Path.home() / "zettelkasten"
        assert config.note_extension == ".md"
        assert config.recursive is False
        assert config.id_precision == IdPrecision.SECOND
        assert config.log_level == "WARNING"
        assert config.log_dir is None
        assert config.editor is None

    def test_zettel_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ZETTEL_HOME", str(tmp_path / "notes"))
        assert ZettelConfig().notes_dir == tmp_path / "notes"

    def test_zettel_home_expands_user(self, monkeypatch):
        monkeypatch.setenv("ZETTEL_HOME", "~/kasten")
        assert ZettelConfig().notes_dir == Path.home() / "kasten"

    def test_empty_zettel_home_uses_default(self, monkeypatch):
        monkeypatch.setenv("ZETTEL_HOME", "")
        assert ZettelConfig().notes_dir == Path.home() / "zettelkasten"

    @pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("no", False)])
    def test_recursive_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("ZETTEL_RECURSIVE", value)
        assert ZettelConfig().recursive is expected

    def test_precision_from_env(self, monkeypatch):
        monkeypatch.setenv("ZETTEL_ID_PRECISION", "minute")
        assert ZettelConfig().id_precision == IdPrecision.MINUTE

    def test_log_level_is_normalized(self):
        assert ZettelConfig(log_level="debug").log_level == "DEBUG"

    def test_index_path_default(self, tmp_path):
        config = ZettelConfig(notes_dir=tmp_path)
        assert config.get_index_path() == tmp_path / ".zettel" / "index.db"

    def test_index_path_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ZETTEL_INDEX_PATH", str(tmp_path / "cache.db"))
        assert ZettelConfig().get_index_path() == tmp_path / "cache.db"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("note_extension", "md"),
            ("note_extension", "."),
            ("slug_separator", "/"),
            ("slug_separator", "--"),
            ("log_level", "LOUD"),
            ("id_precision", "hour"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            ZettelConfig(**{field: value})

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValueError):
            ZettelConfig(colour="blue")


class TestLoadConfig:
    """Tests for load_config."""

    def test_overrides(self, tmp_path):
        config = load_config(notes_dir=tmp_path, log_level="INFO")
        assert config.notes_dir == tmp_path
        assert config.log_level == "INFO"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("ZETTEL_ID_PRECISION", "fortnight")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.config_key == "id_precision"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "zettel.env"
        env_file.write_text(f"ZETTEL_HOME={tmp_path / 'from-file'}\n")
        try:
            assert load_config(env_file=env_file).notes_dir == tmp_path / "from-file"
        finally:
            os.environ.pop("ZETTEL_HOME", None)

    def test_env_file_does_not_override_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ZETTEL_HOME", str(tmp_path / "from-env"))
        env_file = tmp_path / "zettel.env"
        env_file.write_text(f"ZETTEL_HOME={tmp_path / 'from-file'}\n")
        assert load_config(env_file=env_file).notes_dir == tmp_path / "from-env"

    def test_user_env_file(self, monkeypatch, tmp_path):
        user_env = tmp_path / "user.env"
        user_env.write_text("ZETTEL_ID_PRECISION=minute\n")
        monkeypatch.setattr("zettel_cli.config._USER_ENV", user_env)
        try:
            assert load_config().id_precision == IdPrecision.MINUTE
        finally:
            os.environ.pop("ZETTEL_ID_PRECISION", None)

    def test_missing_env_file_is_ignored(self, tmp_path):
        assert load_config(env_file=tmp_path / "absent.env", notes_dir=tmp_path).notes_dir == tmp_path


def _no_home():
    raise RuntimeError("Could not determine home directory.")


class TestUnresolvableHome:
    """Tests for running without a resolvable home directory."""

    def test_user_env_path_default(self, monkeypatch, tmp_path):
        """The user dotenv path is resolved on demand, not at import."""
        monkeypatch.setattr("zettel_cli.config._USER_ENV", None)
        monkeypatch.setattr("zettel_cli.config.Path.home", lambda: tmp_path)
        assert user_env_path() == tmp_path / ".config" / "zettel" / ".env"

    def test_load_config_reports_configuration_error(self, monkeypatch):
        monkeypatch.setattr("zettel_cli.config._USER_ENV", None)
        monkeypatch.setattr("zettel_cli.config.Path.home", _no_home)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.code == ErrorCode.CONFIG_MISSING
        assert exc_info.value.config_key == "ZETTEL_HOME"

    def test_explicit_home_needs_no_lookup(self, monkeypatch, tmp_path):
        monkeypatch.setattr("zettel_cli.config.Path.home", _no_home)
        config = load_config(env_file=tmp_path / "absent.env", notes_dir=tmp_path)
        assert config.notes_dir == tmp_path
