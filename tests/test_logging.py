from __future__ import annotations

import logging

from extension_reconciler.utils.logging import KEY_COMPONENT, TRACE, component_logger


def test_component_and_values_are_appended(caplog):
    log = component_logger("extension_reconciler.test", component="helm")

    with caplog.at_level(logging.INFO, logger="extension_reconciler.test"):
        log.with_values(name="suse-ai-ext", namespace="").info("Installing")

    assert caplog.messages == [f"Installing {KEY_COMPONENT}=helm name=suse-ai-ext"]


def test_trace_level_is_below_debug(caplog):
    log = component_logger("extension_reconciler.test")

    with caplog.at_level(TRACE, logger="extension_reconciler.test"):
        log.trace("patch %s", {"spec": {}})

    assert caplog.records[0].levelname == "TRACE"
    assert caplog.messages == ["patch {'spec': {}}"]
