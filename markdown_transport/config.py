from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_FILENAME = "markdown-transport.yml"
DEFAULT_AUTHOR_NAME = "Markdown Transport"
DEFAULT_AUTHOR_EMAIL = "markdown-transport@example.com"
DEFAULT_EXTENSIONS = (".md", ".markdown")


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


class GitStrategy(str, Enum):
    """How the local checkout is brought up to date before ingestion."""

    CLONE = "clone"
    PULL = "pull"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class GitIdentity:
    """Commit author applied to the local checkout on every sync."""

    name: str
    email: str


class GitAuth(BaseModel):
    """Credentials handed to git when the remote asks for them."""

    username: str | None = None
    password: str | None = None


class TransportConfig(BaseModel):
    """Where content comes from: a local directory or a remote git repository."""

    content_dir: Path | None = Field(
        default=None,
        description="Local content directory used when no repository is configured.",
    )
    repo_url: str | None = Field(default=None, description="Remote repository to mirror.")
    auth: GitAuth | None = Field(default=None)
    strategy: GitStrategy = Field(
        default=GitStrategy.CLONE,
        description="Synchronization strategy: clone (default), pull, or none.",
    )
    local_path: Path | None = Field(
        default=None,
        description="Checkout location. A temporary directory is used when unset.",
    )
    author_name: str | None = Field(default=None)
    author_email: str | None = Field(default=None)
    branch: str | None = Field(
        default=None,
        description="Branch to clone and pull. The remote HEAD is used when unset.",
    )
    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        description="File suffixes recognized as content.",
    )

    @field_validator("content_dir", "local_path", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("repo_url", "author_name", "author_email", "branch", mode="before")
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("repo_url")
    def _reject_option_like_url(cls, value: str | None) -> str | None:
        if value is not None and value.lstrip().startswith("-"):
            raise ValueError("repo_url must not start with '-'.")
        return value

    @field_validator("strategy", mode="before")
    def _normalize_strategy(cls, value: Any) -> Any:
        if value is None or value == "":
            return GitStrategy.CLONE
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("extensions", mode="before")
    def _normalize_extensions(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        suffixes: list[str] = []
        for entry in value or ():
            text = str(entry).strip().lower()
            if not text:
                continue
            if not text.startswith("."):
                text = f".{text}"
            suffixes.append(text)
        return tuple(suffixes) or DEFAULT_EXTENSIONS

    @property
    def identity(self) -> GitIdentity:
        return GitIdentity(
            name=self.author_name or DEFAULT_AUTHOR_NAME,
            email=self.author_email or DEFAULT_AUTHOR_EMAIL,
        )

    @property
    def is_remote(self) -> bool:
        return bool(self.repo_url)


def load_config(path: str | Path) -> TransportConfig:
    """Load configuration and resolve relative paths based on the config location.

    ``path`` may point to a YAML file or to a directory containing
    ``markdown-transport.yml``. A directory without that file yields the
    defaults anchored to the directory.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    if candidate.is_dir():
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    try:
        cfg = TransportConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {candidate}: {exc}") from exc

    def _abs_optional(value: Path | None) -> Path | None:
        if value is None:
            return None
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.content_dir = _abs_optional(cfg.content_dir)
    cfg.local_path = _abs_optional(cfg.local_path)
    return cfg


def config_from_env(environ: Mapping[str, str | None]) -> TransportConfig:
    """Build a configuration from environment-style variables.

    A repository URL switches to remote mode; otherwise ``CONTENT_DIR`` names
    the local content directory.
    """
    repo_url = environ.get("CONTENT_GIT_REPO_URL")
    if not repo_url:
        return _build_config({"content_dir": environ.get("CONTENT_DIR")})

    username = environ.get("GIT_USERNAME")
    auth = None
    if username:
        auth = {"username": username, "password": environ.get("GIT_PASSWORD")}

    return _build_config(
        {
            "repo_url": repo_url,
            "auth": auth,
            "strategy": environ.get("GIT_STRATEGY"),
            "local_path": environ.get("GIT_LOCAL_PATH"),
            "author_name": environ.get("GIT_AUTHOR_NAME"),
            "author_email": environ.get("GIT_AUTHOR_EMAIL"),
            "branch": environ.get("GIT_BRANCH"),
        }
    )


def _build_config(data: dict[str, Any]) -> TransportConfig:
    try:
        return TransportConfig(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} should define a mapping.")
    return data
