from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

_REDACTED_KEYS = {"token", "refreshtoken", "refresh_token", "authorization", "password"}


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(message)s")


def log_json(logger: logging.Logger, payload: dict, level: int = logging.INFO) -> None:
    record = {"ts": datetime.now(timezone.utc).isoformat()}
    record.update(
        {key: ("***" if key.lower() in _REDACTED_KEYS else value) for key, value in payload.items()}
    )
    logger.log(level, json.dumps(record, ensure_ascii=False, default=str))
