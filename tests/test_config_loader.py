"""Tests for YAML config discovery, !include and env var interpolation."""

from pathlib import Path

import pytest
import yaml

from blog_sync.config_loader import (
    discover_config_files,
    interpolate_env_vars,
    load_hierarchical_config,
    load_yaml_file,
)

# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for interpolate_env_vars()."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("BLOG_ALIAS", "myblog")
        assert interpolate_env_vars("${BLOG_ALIAS}") == "myblog"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("BLOG_UNSET", raising=False)
        assert interpolate_env_vars("a${BLOG_UNSET}b") == "ab"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("BLOG_UNSET", raising=False)
        assert interpolate_env_vars("${BLOG_UNSET:-snapas}") == "snapas"

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("BLOG_EMPTY", "")
        assert interpolate_env_vars("${BLOG_EMPTY:-x}") == "x"

    def test_default_ignored_when_set(self, monkeypatch):
        monkeypatch.setenv("BLOG_SET", "real")
        assert interpolate_env_vars("${BLOG_SET:-x}") == "real"

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${OPEN") == "${OPEN"


# ---------------------------------------------------------------------------
# !include support
# ---------------------------------------------------------------------------


class TestIncludeDirective:
    """Tests for the !include tag."""

    def test_include_relative_file(self, tmp_path):
        (tmp_path / "secrets.yml").write_text("password: s3cret\n")
        main = tmp_path / "config.yml"
        main.write_text("blog: !include secrets.yml\n")

        assert load_yaml_file(main) == {"blog": {"password": "s3cret"}}

    def test_nested_includes(self, tmp_path):
        (tmp_path / "c.yml").write_text("value: 3\n")
        (tmp_path / "b.yml").write_text("inner: !include c.yml\n")
        main = tmp_path / "a.yml"
        main.write_text("outer: !include b.yml\n")

        assert load_yaml_file(main) == {"outer": {"inner": {"value": 3}}}

    def test_include_nonexistent_raises(self, tmp_path):
        main = tmp_path / "config.yml"
        main.write_text("blog: !include missing.yml\n")
        with pytest.raises(FileNotFoundError, match="missing.yml"):
            load_yaml_file(main)

    def test_circular_include_raises(self, tmp_path):
        (tmp_path / "a.yml").write_text("x: !include b.yml\n")
        (tmp_path / "b.yml").write_text("y: !include a.yml\n")
        with pytest.raises(ValueError, match="Circular include"):
            load_yaml_file(tmp_path / "a.yml")

    def test_self_include_raises(self, tmp_path):
        (tmp_path / "a.yml").write_text("x: !include a.yml\n")
        with pytest.raises(ValueError, match="Circular include"):
            load_yaml_file(tmp_path / "a.yml")

    def test_global_safe_loader_not_polluted(self):
        with pytest.raises(yaml.constructor.ConstructorError):
            yaml.safe_load("x: !include other.yml\n")


# ---------------------------------------------------------------------------
# Discovery and merge
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated(tmp_path, clean_env):
    """Run with cwd and HOME inside tmp_path."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    clean_env.setenv("HOME", str(home))
    clean_env.chdir(project)
    return home, project


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDiscoverConfigFiles:
    def test_empty_filesystem_returns_empty(self, isolated):
        assert discover_config_files() == []

    def test_order(self, isolated, clean_env, tmp_path):
        home, project = isolated
        env_file = _write(tmp_path / "env.yml", "{}")
        local = _write(project / ".blog_sync" / "config.yml", "{}")
        legacy = _write(project / ".blog_sync" / "config.yaml", "{}")
        user = _write(home / ".config" / "blog_sync" / "config.yml", "{}")
        clean_env.setenv("BLOG_SYNC_CONFIG", str(env_file))

        found = discover_config_files()

        assert [p.resolve() for p in found] == [
            env_file.resolve(),
            local.resolve(),
            legacy.resolve(),
            user.resolve(),
        ]


class TestLoadHierarchicalConfig:
    def test_zero_config_returns_empty_dict(self, isolated):
        assert load_hierarchical_config() == {}

    def test_project_overrides_user_at_section_level(self, isolated):
        home, project = isolated
        _write(
            home / ".config" / "blog_sync" / "config.yml",
            "blog:\n  alias: user\n  login: alice\nretry:\n  attempts: 2\n",
        )
        _write(project / ".blog_sync" / "config.yml", "blog:\n  alias: project\n")

        merged = load_hierarchical_config()

        # Whole sections are replaced, not deep-merged
        assert merged["blog"] == {"alias": "project"}
        assert merged["retry"] == {"attempts": 2}

    def test_env_var_interpolation_after_merge(self, isolated, clean_env):
        _, project = isolated
        clean_env.setenv("WRITEAS_PASS", "from-env")
        _write(
            project / ".blog_sync" / "config.yml",
            "blog:\n  password: ${WRITEAS_PASS}\n  alias: ${BLOG_X:-dflt}\n",
        )

        merged = load_hierarchical_config()

        assert merged["blog"] == {"password": "from-env", "alias": "dflt"}

    def test_non_dict_root_skipped(self, isolated):
        _, project = isolated
        _write(project / ".blog_sync" / "config.yml", "- a\n- b\n")
        assert load_hierarchical_config() == {}
