"""Subprocess driver for the ``helm`` binary."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

import yaml

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import (
    HelmCommandError,
    HelmTimeoutError,
    ReleaseNotFoundError,
)
from extension_reconciler.models.release import ReleaseSpec

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKER = "release: not found"


def _go_duration(seconds: float) -> str:
    return f"{max(int(seconds), 1)}s"


class HelmCLI:
    """Runs helm commands and maps failures onto the engine's error types."""

    def __init__(self, binary: str | None = None, kube_context: str | None = None):
        self.binary = binary or settings.helm_binary
        self.kube_context = kube_context if kube_context is not None else settings.kube_context

    def run(self, args: list[str], timeout: float, stdin: str | None = None) -> str:
        cmd = [self.binary, *args]
        if self.kube_context:
            cmd.extend(["--kube-context", self.kube_context])
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise HelmTimeoutError(args, timeout) from e
        except FileNotFoundError as e:
            raise HelmCommandError(args, 127, f"{self.binary}: executable not found") from e

        if result.returncode != 0:
            if _NOT_FOUND_MARKER in result.stderr:
                raise ReleaseNotFoundError(args, result.returncode, result.stderr)
            raise HelmCommandError(args, result.returncode, result.stderr)
        return result.stdout

    @staticmethod
    def _values_stdin(values: dict[str, Any]) -> str:
        return yaml.safe_dump(values or {}, default_flow_style=False)

    def install(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> None:
        args = [
            "install", spec.name, chart_path,
            "--namespace", spec.namespace,
            "--create-namespace",
            "--values", "-",
            "--timeout", _go_duration(timeout),
        ]
        self.run(args, timeout=timeout, stdin=self._values_stdin(spec.values))

    def upgrade(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> None:
        """Real upgrade: waits for resources, never rolls back on failure."""
        args = [
            "upgrade", spec.name, chart_path,
            "--namespace", spec.namespace,
            "--values", "-",
            "--wait",
            "--timeout", _go_duration(timeout),
        ]
        self.run(args, timeout=timeout, stdin=self._values_stdin(spec.values))

    def render_upgrade(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> str:
        """Dry-run an upgrade and return the manifest it would apply."""
        args = [
            "upgrade", spec.name, chart_path,
            "--namespace", spec.namespace,
            "--values", "-",
            "--dry-run",
            "--output", "json",
        ]
        out = self.run(args, timeout=timeout, stdin=self._values_stdin(spec.values))
        try:
            rendered = json.loads(out)
        except ValueError as e:
            raise HelmCommandError(args, 0, f"unparseable dry-run output: {e}") from e
        return rendered.get("manifest", "")

    def uninstall(self, name: str, namespace: str, timeout: float) -> None:
        args = [
            "uninstall", name,
            "--namespace", namespace,
            "--cascade", "foreground",
            "--wait",
            "--timeout", _go_duration(timeout),
        ]
        self.run(args, timeout=timeout)

    def pull(
        self,
        ref: str,
        version: str,
        destination: Path,
        timeout: float,
        repo_url: str = "",
    ) -> Path:
        """Download a chart archive into ``destination`` and return its path."""
        args = ["pull", ref, "--destination", str(destination)]
        if version:
            args.extend(["--version", version])
        if repo_url:
            args.extend(["--repo", repo_url])
        before = set(destination.glob("*.tgz"))
        self.run(args, timeout=timeout)
        pulled = sorted(set(destination.glob("*.tgz")) - before)
        if not pulled:
            raise HelmCommandError(args, 0, "helm pull produced no chart archive")
        return pulled[0]
