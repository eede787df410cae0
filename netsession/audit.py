"""Structured audit logging."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import LoggingSettings


class AuditLogger:
    """Writes authentication decisions as JSON lines.

    Tokens are never passed in here; only the outcome and its reason code.
    """

    def __init__(self, settings: LoggingSettings, tenant_id: str) -> None:
        self.logger = logging.getLogger("netsession.audit")
        if not self.logger.handlers:
            handler: logging.Handler
            if settings.output == "file":
                handler = RotatingFileHandler(
                    settings.file_path,
                    maxBytes=settings.rotate_bytes,
                    backupCount=3,
                )
            else:
                handler = logging.StreamHandler()
            formatter = logging.Formatter("%(message)s")
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
        self.tenant_id = tenant_id

    def log(
        self,
        *,
        ip: str,
        decision: str,
        code: Optional[str] = None,
        username: Optional[str] = None,
        session_id: Optional[str] = None,
        entry: Optional[int] = None,
    ) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "tenant": self.tenant_id,
            "ip": ip,
            "decision": decision,
            "code": code,
            "username": username,
            "session_id": session_id,
            "entry": entry,
        }
        if decision == "reject":
            level = logging.WARNING
        elif decision == "pass":
            level = logging.DEBUG
        else:
            level = logging.INFO
        self.logger.log(level, json.dumps(payload))
