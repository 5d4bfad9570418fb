"""Tests for path utilities."""

from pathlib import Path

from gcontact_vcard.utils.paths import (
    CONFIG_DIR_ENV_VAR,
    DEFAULT_CONFIG_DIR,
    ensure_private_dir,
    resolve_config_dir,
)


class TestDefaultConfigDir:
    """Test DEFAULT_CONFIG_DIR constant."""

    def test_default_config_dir_is_in_home(self):
        """Default config dir should be ~/.gcontact-vcard."""
        assert Path.home() / ".gcontact-vcard" == DEFAULT_CONFIG_DIR

    def test_env_var_name(self):
        """The override variable is named after the project."""
        assert CONFIG_DIR_ENV_VAR == "GCONTACT_VCARD_CONFIG_DIR"


class TestResolveConfigDir:
    """Test resolve_config_dir function."""

    def test_explicit_path_string(self, tmp_path):
        """Explicit path string should be used."""
        assert resolve_config_dir(str(tmp_path)) == tmp_path.resolve()

    def test_explicit_path_with_tilde(self):
        """Explicit path with ~ should be expanded."""
        result = resolve_config_dir("~/vcard-config")
        assert result == Path.home() / "vcard-config"

    def test_env_var_override(self, tmp_path, monkeypatch):
        """Environment variable is used when no explicit path is given."""
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path))
        assert resolve_config_dir(None) == tmp_path.resolve()

    def test_default_when_no_explicit_and_no_env(self, monkeypatch):
        """Default should be used when no explicit path and no env var."""
        monkeypatch.delenv(CONFIG_DIR_ENV_VAR, raising=False)
        assert resolve_config_dir(None) == DEFAULT_CONFIG_DIR.expanduser().resolve()

    def test_explicit_overrides_env_var(self, tmp_path, monkeypatch):
        """Explicit path should override environment variable."""
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path / "env"))
        explicit = tmp_path / "explicit"
        assert resolve_config_dir(explicit) == explicit.resolve()

    def test_relative_path_becomes_absolute(self, tmp_path, monkeypatch):
        """Relative paths are resolved against the working directory."""
        monkeypatch.chdir(tmp_path)
        result = resolve_config_dir("relative-dir")
        assert result.is_absolute()
        assert result == (tmp_path / "relative-dir").resolve()


class TestEnsurePrivateDir:
    """Test ensure_private_dir function."""

    def test_creates_owner_only_directory(self, tmp_path):
        """Missing directories are created with mode 0700."""
        target = tmp_path / "a" / "b"

        assert ensure_private_dir(target) is True
        assert target.is_dir()
        assert target.stat().st_mode & 0o777 == 0o700

    def test_existing_directory_untouched(self, tmp_path):
        """Existing directories are reported and keep their mode."""
        tmp_path.chmod(0o755)

        assert ensure_private_dir(tmp_path) is False
        assert tmp_path.stat().st_mode & 0o777 == 0o755
