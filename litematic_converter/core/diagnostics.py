from __future__ import annotations

import logging
from collections import Counter

LOGGER_NAME = "litematic_converter"


class Diagnostics:
    """Sink for recoverable problems, passed into every core component.

    Messages go to a stdlib logger; warnings are also counted per category
    so callers can report how much of a schematic was skipped.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.counts: Counter[str] = Counter()

    def debug(self, msg: str, *args):
        self.logger.debug(msg, *args)

    def info(self, msg: str, *args):
        self.logger.info(msg, *args)

    def warn(self, category: str, msg: str, *args):
        self.counts[category] += 1
        self.logger.warning(msg, *args)

    @property
    def total_warnings(self) -> int:
        return sum(self.counts.values())
