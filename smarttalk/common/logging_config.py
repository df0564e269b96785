import json
import logging
import re
from datetime import datetime, timezone

MASK = "***MASKED***"

# (pattern, replacement) pairs; a named `keep` group survives masking.
SECRET_PATTERNS = [
    # ?key=... in request URLs
    (re.compile(r"(?P<keep>\bkey=)[^&\s\"']+"), rf"\g<keep>{MASK}"),
    # provider keys and our own JWTs sent as bearer tokens
    (re.compile(r"(?P<keep>\bBearer\s+)[^\"'\s]+", re.IGNORECASE), rf"\g<keep>{MASK}"),
    (re.compile(r"AIzaSy[A-Za-z0-9\-_]{33}"), MASK),
    (re.compile(r"sk-[A-Za-z0-9\-_]{20,}"), MASK),
    (re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+"), MASK),
]

NOISY_LOGGERS = ("uvicorn.access", "pymongo", "aiosmtplib")
URL_LOGGERS = ("httpx", "httpcore")


class ApiKeyFilter(logging.Filter):
    """Masks credentials in log messages and their %-style arguments."""

    # Exact values registered at startup (provider keys, SMTP password).
    KNOWN_KEYS = set()

    @classmethod
    def add_sensitive_keys(cls, keys):
        cls.KNOWN_KEYS.update(str(k) for k in keys or () if k)

    def mask(self, s: str) -> str:
        for pattern, replacement in SECRET_PATTERNS:
            s = pattern.sub(replacement, s)
        for key in self.KNOWN_KEYS:
            s = s.replace(key, MASK)
        return s

    def _mask_value(self, value):
        return self.mask(value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._mask_value(record.msg)
        if isinstance(record.args, dict):
            record.args = {k: self._mask_value(v) for k, v in record.args.items()}
        elif record.args:
            record.args = tuple(self._mask_value(a) for a in record.args)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger name, message."""

    def format(self, record):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_json_logging(level: str = "INFO"):
    """Routes every log record to stderr as JSON, with credentials masked."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    handler.addFilter(ApiKeyFilter())

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # httpx logs full request URLs; mask them before any handler sees them.
    for name in URL_LOGGERS:
        url_logger = logging.getLogger(name)
        url_logger.filters[:] = [ApiKeyFilter()]
        url_logger.propagate = True

    logging.info("JSON logging configured.")
