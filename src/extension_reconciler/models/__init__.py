"""Data models for the extension reconciler."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class InstallSource(enum.Enum):
    HELM = "helm"
    REPO = "repo"


class Phase(enum.Enum):
    PENDING = "Pending"
    INSTALLED = "Installed"
    FAILED = "Failed"
    DELETED = "Deleted"


@dataclass
class ExtensionStatus:
    phase: Phase = Phase.PENDING
    message: str = ""
