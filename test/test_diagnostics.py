import logging

from litematic_converter.core.diagnostics import LOGGER_NAME, Diagnostics


def test_warnings_are_counted_and_logged(caplog):
    diagnostics = Diagnostics()

    with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
        diagnostics.warn("unknown-block", "Unknown block type: %s", "minecraft:foo")
        diagnostics.warn("unknown-block", "Unknown block type: %s", "minecraft:bar")
        diagnostics.warn("palette-index", "Invalid palette index %d", 9)
        diagnostics.debug("not counted")

    assert diagnostics.counts == {"unknown-block": 2, "palette-index": 1}
    assert diagnostics.total_warnings == 3
    assert "Unknown block type: minecraft:foo" in caplog.messages
    assert "not counted" in caplog.messages


def test_custom_logger():
    logger = logging.getLogger("some.host")
    assert Diagnostics(logger).logger is logger
