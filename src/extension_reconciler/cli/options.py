"""Shared CLI options."""

from __future__ import annotations

import typer

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Release namespace (default: extension namespace)")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
TimeoutOption = typer.Option(60.0, "--timeout", help="Overall deadline for cluster and HTTP calls, in seconds")
