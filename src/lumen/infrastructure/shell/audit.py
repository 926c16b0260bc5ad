"""Audit sink backed by the logging module."""

import json
import logging

from lumen.domain.entities import AuditEntry

AUDIT_LOGGER_NAME = "lumen.audit"


class LoggingAuditSink:
    """Writes each audit entry as one JSON line to the ``lumen.audit`` logger.

    Route that logger to a file handler to keep a persistent audit trail.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    async def record(self, entry: AuditEntry) -> None:
        self._logger.info(json.dumps(entry.to_dict(), ensure_ascii=False))
