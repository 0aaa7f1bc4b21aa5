"""Per-remote logging adapter."""

from __future__ import annotations

import logging

from remotesync._constants import LOGGER_NAME


class RemoteLogger(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Log on ``remotesync.<name>`` and honour the remote's ``show_logs`` flag."""

    def __init__(self, name: str, *, enabled: bool = True) -> None:
        super().__init__(logging.getLogger(LOGGER_NAME).getChild(name.lower()), {"remote": name})
        self.enabled = enabled

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802
        return self.enabled and self.logger.isEnabledFor(level)
