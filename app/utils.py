import logging
import re
from datetime import datetime, timezone

# Custom logging formatter to support colors
class ColoredFormatter(logging.Formatter):
    # Define color codes
    COLORS = {
        'DEBUG': '\033[94m',   # Blue
        'INFO': '\033[92m',    # Green
        'WARNING': '\033[93m', # Yellow
        'ERROR': '\033[91m',   # Red
        'CRITICAL': '\033[95m' # Magenta
    }
    RESET = '\033[0m'  # Reset color

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(record)

# Filter to remove date from http access logs
class FilterRemoveDateFromWerkzeugLogs(logging.Filter):
    # '192.168.0.102 - - [30/Jun/2024 01:14:03] "%s" %s %s' -> '192.168.0.102 - "%s" %s %s'
    pattern: re.Pattern = re.compile(r' - - \[.+?] "')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.pattern.sub(' - "', record.msg)
        return True


def clean_text(value):
    """
    Normalize an optional text value.

    Strings are trimmed and a blank result becomes None; None stays None.
    Every comparison between stored and submitted contact values goes
    through this so both sides share one representation.
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def effective_value(updated, original):
    """The override if present and non-blank, else the baseline."""
    return clean_text(updated) or clean_text(original)


def mask_phone(phone):
    """0912345678 -> 09******78, for log lines."""
    phone = clean_text(phone)
    if not phone:
        return None
    if len(phone) <= 4:
        return "***"
    return f"{phone[:2]}{'*' * (len(phone) - 4)}{phone[-2:]}"


def sanitize_sensitive_data(data, sensitive_keys=None):
    """
    Mask sensitive values before logging.

    Args:
        data: Dictionary, list or scalar to sanitize
        sensitive_keys: Key fragments to mask (default: credentials, codes and phone numbers)

    Returns:
        Sanitized copy of the data
    """
    if sensitive_keys is None:
        sensitive_keys = [
            'password', 'pwd', 'secret', 'token',
            'code', 'phone', 'id_last_four', 'idlastfour',
        ]

    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            key_lower = str(k).lower()
            if any(sens in key_lower for sens in sensitive_keys):
                if 'phone' in key_lower:
                    sanitized[k] = mask_phone(v)
                else:
                    sanitized[k] = "***" if v is not None else None
            elif isinstance(v, (dict, list)):
                sanitized[k] = sanitize_sensitive_data(v, sensitive_keys)
            else:
                sanitized[k] = v
        return sanitized

    if isinstance(data, list):
        return [sanitize_sensitive_data(item, sensitive_keys) if isinstance(item, (dict, list)) else item for item in data]

    return data


def now_utc():
    """Returns current datetime in UTC (aware)"""
    return datetime.now(timezone.utc)

def ensure_utc(dt):
    """
    Ensure a datetime object is aware and in UTC.
    Handles ISO strings, None, and naive datetimes (assumed UTC, as SQLite returns them).
    """
    if dt is None:
        return None

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
        except (ValueError, TypeError, AttributeError):
            return None

    if not hasattr(dt, 'tzinfo'):
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def isoformat_utc(dt):
    dt = ensure_utc(dt)
    return dt.isoformat().replace('+00:00', 'Z') if dt else None
