"""Logging helpers: root configuration, a TRACE level and key/value adapters."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

KEY_EXTENSION = "extension"
KEY_NAMESPACE = "namespace"
KEY_COMPONENT = "component"
KEY_PHASE = "phase"
KEY_RESOURCE = "resource"
KEY_NAME = "name"
KEY_VERSION = "version"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


class ComponentLogger(logging.LoggerAdapter):
    """Appends ``key=value`` context to every message."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        if self.extra:
            pairs = " ".join(f"{k}={v}" for k, v in self.extra.items() if v not in (None, ""))
            if pairs:
                msg = f"{msg} {pairs}"
        return msg, kwargs

    def with_values(self, **values: Any) -> ComponentLogger:
        merged = dict(self.extra or {})
        merged.update(values)
        return ComponentLogger(self.logger, merged)

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(TRACE, msg, *args, **kwargs)


def component_logger(name: str, component: str = "", **values: Any) -> ComponentLogger:
    if component:
        values = {KEY_COMPONENT: component, **values}
    return ComponentLogger(logging.getLogger(name), values)
