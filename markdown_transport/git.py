"""Keep a local checkout of the content repository in sync with its remote."""

from __future__ import annotations

import base64
import contextlib
import logging
import os
import re
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterator, Mapping, Sequence

from .config import ConfigError, GitAuth, GitIdentity, GitStrategy, TransportConfig

logger = logging.getLogger(__name__)

GitRunner = Callable[[Sequence[str], Mapping[str, str]], subprocess.CompletedProcess[str]]
CredentialProvider = Callable[[], GitAuth | None]

TEMP_PREFIX = "markdown-transport-"

_AUTH_FAILURE = re.compile(
    r"authentication failed"
    r"|could not read (username|password)"
    r"|terminal prompts disabled"
    r"|invalid username or password"
    r"|returned error: 40[13]",
    re.IGNORECASE,
)


class TransportError(RuntimeError):
    """Raised when git fails to clone, pull, or configure the checkout."""


class GitUnavailableError(TransportError):
    """Raised when the git executable cannot be found or started."""


class GitAuthenticationError(TransportError):
    """Raised when the remote rejects the supplied credentials."""


class GitTransport:
    """Thin wrapper over the git command line.

    Only shallow single-branch clones and fast-forward pulls are supported.
    """

    def __init__(self, executable: str = "git", runner: GitRunner | None = None) -> None:
        self._executable = executable
        self._runner = runner or _run_subprocess

    def is_checkout(self, directory: Path) -> bool:
        return (Path(directory) / ".git").exists()

    def clone(
        self,
        url: str,
        destination: Path,
        *,
        branch: str | None = None,
        credentials: CredentialProvider | None = None,
    ) -> None:
        args = ["clone", "--depth", "1", "--single-branch"]
        if branch:
            args.extend(["--branch", branch])
        args.extend(["--", _checked_url(url), str(destination)])
        self._run(args, action="clone", env=_auth_env(credentials))

    def pull(
        self,
        url: str,
        directory: Path,
        *,
        branch: str | None = None,
        credentials: CredentialProvider | None = None,
    ) -> None:
        args = ["-C", str(directory), "pull", "--ff-only", "--", _checked_url(url)]
        if branch:
            args.append(branch)
        self._run(args, action="pull", env=_auth_env(credentials))

    def set_identity(self, directory: Path, identity: GitIdentity) -> None:
        self._run(["-C", str(directory), "config", "user.name", identity.name], action="config")
        self._run(["-C", str(directory), "config", "user.email", identity.email], action="config")

    def _run(
        self,
        args: Sequence[str],
        *,
        action: str,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        command = [self._executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = self._runner(command, dict(env or {}))
        except OSError as exc:
            raise GitUnavailableError(
                f"git executable '{self._executable}' could not be started: {exc}"
            ) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if _AUTH_FAILURE.search(stderr):
                raise GitAuthenticationError(f"git {action} was denied by the remote: {stderr}")
            raise TransportError(f"git {action} failed with exit code {result.returncode}: {stderr}")
        return result


def sync(config: TransportConfig, *, transport: GitTransport | None = None) -> Path:
    """Bring the local checkout up to date according to ``config.strategy``.

    Returns the checkout directory. When ``config.local_path`` is unset a fresh
    temporary directory is allocated and handed to the caller.
    """
    if not config.repo_url:
        raise ConfigError("Git repository URL is not specified.")
    git = transport or GitTransport()
    directory = _resolve_local_path(config)
    return _synchronize(config, directory, git, config.strategy)


def pull_repository(config: TransportConfig, *, transport: GitTransport | None = None) -> Path:
    """Pull into an existing checkout, cloning first if none is present."""
    if not config.repo_url:
        raise ConfigError("Git repository URL is not specified.")
    if config.local_path is None:
        raise ConfigError("Git local path is not specified for pull operation.")
    git = transport or GitTransport()
    directory = config.local_path.resolve()
    return _synchronize(config, directory, git, GitStrategy.PULL)


@contextlib.contextmanager
def checkout(config: TransportConfig, *, transport: GitTransport | None = None) -> Iterator[Path]:
    """Sync and yield the checkout, removing it afterwards if it was temporary."""
    if config.local_path is not None:
        yield sync(config, transport=transport)
        return

    temporary = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    try:
        yield sync(config.model_copy(update={"local_path": temporary}), transport=transport)
    finally:
        shutil.rmtree(temporary, ignore_errors=True)


def _synchronize(
    config: TransportConfig,
    directory: Path,
    git: GitTransport,
    strategy: GitStrategy,
) -> Path:
    # Checkout presence is read from disk on every call, never cached.
    cloned = git.is_checkout(directory)
    logger.info("Using local path %s for git operations (checkout present: %s).", directory, cloned)

    if strategy is GitStrategy.NONE:
        logger.info("Git strategy is 'none'; skipping git operations for %s.", directory)
    elif strategy is GitStrategy.PULL and cloned:
        _pull(config, directory, git)
    else:
        if strategy is GitStrategy.PULL:
            logger.info(
                "Repository not found at %s; cloning %s instead of pulling.",
                directory,
                config.repo_url,
            )
        _fresh_clone(config, directory, git)

    _apply_identity(config, directory, git)
    return directory


def _pull(config: TransportConfig, directory: Path, git: GitTransport) -> None:
    assert config.repo_url is not None
    logger.info("Pulling updates for %s into %s...", config.repo_url, directory)
    try:
        git.pull(
            config.repo_url,
            directory,
            branch=config.branch,
            credentials=_credentials(config),
        )
    except GitAuthenticationError as exc:
        # Content already on disk is still served.
        logger.error("Git authentication failed during pull: %s", exc)


def _fresh_clone(config: TransportConfig, directory: Path, git: GitTransport) -> None:
    assert config.repo_url is not None
    _reset_directory(directory)
    logger.info("Cloning %s into %s...", config.repo_url, directory)
    try:
        git.clone(
            config.repo_url,
            directory,
            branch=config.branch,
            credentials=_credentials(config),
        )
    except GitAuthenticationError:
        logger.error("Git authentication failed during clone of %s.", config.repo_url)
        shutil.rmtree(directory, ignore_errors=True)
        raise
    except BaseException:
        logger.warning("Clone of %s did not complete; removing %s.", config.repo_url, directory)
        shutil.rmtree(directory, ignore_errors=True)
        raise


def _apply_identity(config: TransportConfig, directory: Path, git: GitTransport) -> None:
    if not git.is_checkout(directory):
        logger.debug("No checkout at %s; author identity not applied.", directory)
        return
    git.set_identity(directory, config.identity)


def _credentials(config: TransportConfig) -> CredentialProvider:
    def provide() -> GitAuth | None:
        return config.auth

    return provide


def _resolve_local_path(config: TransportConfig) -> Path:
    if config.local_path is not None:
        return config.local_path.resolve()
    directory = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    logger.info("No local path configured; using temporary directory %s.", directory)
    return directory


def _reset_directory(path: Path) -> None:
    """Remove a directory and recreate it empty."""
    if path.exists():
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    path.mkdir(parents=True, exist_ok=True)


def _checked_url(url: str) -> str:
    if url.lstrip().startswith("-"):
        raise TransportError(f"Refusing repository URL that looks like an option: {url!r}")
    return url


def _auth_env(credentials: CredentialProvider | None) -> dict[str, str]:
    """Build git config environment entries carrying the basic-auth header.

    The header travels through ``GIT_CONFIG_*`` variables so the secret never
    appears in the process arguments.
    """
    if credentials is None:
        return {}
    auth = credentials()
    if auth is None or not auth.username:
        return {}
    token = base64.b64encode(f"{auth.username}:{auth.password or ''}".encode("utf-8")).decode("ascii")
    return {
        "GIT_CONFIG_COUNT": "1",
        "GIT_CONFIG_KEY_0": "http.extraHeader",
        "GIT_CONFIG_VALUE_0": f"Authorization: Basic {token}",
    }


def _run_subprocess(command: Sequence[str], env: Mapping[str, str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        command,
        check=False,
        capture_output=True,
        text=True,
        env={**os.environ, "GIT_TERMINAL_PROMPT": "0", **env},
    )
