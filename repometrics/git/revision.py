"""Revision lookups for working copies."""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import Callable, Iterable

from ..errors import RevisionUnavailable


class GitRevisionOracle:
    """Reads the commit a working copy is checked out at."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    async def __call__(self, path: Path | str) -> str:
        return await asyncio.to_thread(self.current_revision, path)

    def current_revision(self, path: Path | str) -> str:
        """Return the full hash of ``HEAD`` for the working copy at ``path``."""
        repo = Path(path)
        output = self._git(["git", "rev-parse", "HEAD"], repo)
        revision = output.strip()
        if not revision:
            raise RevisionUnavailable(repo, "git returned an empty revision")
        return revision

    def repository_name(self, path: Path | str) -> str:
        """Derive a display label from the ``origin`` remote URL."""
        repo = Path(path)
        url = self._git(["git", "config", "--get", "remote.origin.url"], repo).strip()
        if not url:
            raise RevisionUnavailable(repo, "no origin remote configured")
        name = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return name[:1].upper() + name[1:]

    # ------------------------------------------------------------------
    # Internals

    def _git(self, args: Iterable[str], repo: Path) -> str:
        if not repo.is_dir():
            raise RevisionUnavailable(repo, "directory does not exist")
        try:
            return self._runner(args, cwd=repo, capture_output=True)
        except FileNotFoundError as exc:
            raise RevisionUnavailable(repo, "git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise RevisionUnavailable(repo, detail) from exc

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


__all__ = ["GitRevisionOracle"]
