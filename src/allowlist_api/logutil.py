import logging
import re
from typing import Iterable


_KEY_MATERIAL = re.compile(r"\b(sk_b64|secret|private_key|signing_key)=\S+", re.IGNORECASE)
_RAW_KEY_HEX = re.compile(r"\b(sk|seed)\s*[:=]\s*(0x)?[0-9a-fA-F]{64}\b", re.IGNORECASE)


class RedactingFilter(logging.Filter):
    """Mask signing-key material that might end up in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = str(record.getMessage())
        redacted = _KEY_MATERIAL.sub(r"\1=***", msg)
        redacted = _RAW_KEY_HEX.sub(r"\1=***", redacted)
        if redacted != msg:
            record.msg = redacted
            record.args = ()
        return True


def setup_logging(
    level=logging.INFO,
    loggers: Iterable[str] = ("allowlist_api", "allowlist_cli", "uvicorn", "uvicorn.access"),
) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level)
    f = RedactingFilter()
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)
