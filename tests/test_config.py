from __future__ import annotations

from pathlib import Path

import pytest

from markdown_transport.config import ConfigError, GitStrategy, TransportConfig, config_from_env, load_config


def _write_project_config(root: Path) -> Path:
    config_text = (
        "repo_url: https://example.com/content.git\n"
        "strategy: Pull\n"
        "local_path: .cache/content\n"
        "content_dir: content\n"
        "auth:\n"
        "  username: reader\n"
        "  password: s3cret\n"
        "author_name: Site Bot\n"
        "extensions: [md, .MDX]\n"
    )
    cfg_path = root / "markdown-transport.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_resolves_paths_relative_to_config_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    cfg = load_config(project)

    assert cfg.local_path == (project / ".cache" / "content").resolve()
    assert cfg.content_dir == (project / "content").resolve()
    assert cfg.strategy is GitStrategy.PULL
    assert cfg.auth is not None and cfg.auth.username == "reader"
    assert cfg.extensions == (".md", ".mdx")
    assert cfg.identity.name == "Site Bot"
    assert cfg.identity.email == "markdown-transport@example.com"


def test_load_config_accepts_config_file_path(tmp_path: Path) -> None:
    project = tmp_path / "siteproj"
    project.mkdir()
    config_file = _write_project_config(project)

    cfg = load_config(config_file)

    assert cfg.local_path == (project / ".cache" / "content").resolve()


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)

    assert cfg.repo_url is None
    assert cfg.content_dir is None
    assert cfg.strategy is GitStrategy.CLONE
    assert cfg.extensions == (".md", ".markdown")


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yml")


def test_load_config_rejects_unknown_strategy(tmp_path: Path) -> None:
    path = tmp_path / "bad.yml"
    path.write_text("repo_url: https://example.com/x.git\nstrategy: merge\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_option_like_repo_url(tmp_path: Path) -> None:
    path = tmp_path / "hostile.yml"
    path.write_text("repo_url: '--upload-pack=touch pwned'\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_unspecified_strategy_means_clone() -> None:
    assert TransportConfig(repo_url="https://example.com/x.git", strategy=None).strategy is GitStrategy.CLONE


def test_config_from_env_remote() -> None:
    cfg = config_from_env(
        {
            "CONTENT_GIT_REPO_URL": "https://example.com/content.git",
            "GIT_USERNAME": "reader",
            "GIT_PASSWORD": "s3cret",
            "GIT_STRATEGY": "none",
            "GIT_LOCAL_PATH": "/srv/content",
            "GIT_AUTHOR_NAME": "",
            "GIT_AUTHOR_EMAIL": "bot@example.com",
        }
    )

    assert cfg.is_remote
    assert cfg.strategy is GitStrategy.NONE
    assert cfg.local_path == Path("/srv/content")
    assert cfg.auth is not None and cfg.auth.password == "s3cret"
    assert cfg.identity.name == "Markdown Transport"
    assert cfg.identity.email == "bot@example.com"


def test_config_from_env_without_username_has_no_auth() -> None:
    cfg = config_from_env({"CONTENT_GIT_REPO_URL": "https://example.com/content.git", "GIT_PASSWORD": "x"})

    assert cfg.auth is None
    assert cfg.strategy is GitStrategy.CLONE


def test_config_from_env_local_directory() -> None:
    cfg = config_from_env({"CONTENT_DIR": "content"})

    assert not cfg.is_remote
    assert cfg.content_dir == Path("content")


def test_config_from_env_rejects_unknown_strategy() -> None:
    with pytest.raises(ConfigError):
        config_from_env({"CONTENT_GIT_REPO_URL": "https://example.com/x.git", "GIT_STRATEGY": "rebase"})
