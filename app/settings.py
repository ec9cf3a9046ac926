from constants import *
import copy
import yaml
import os

import logging

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None


def _merge_defaults(settings):
    # Deep merge with defaults so new keys are always present
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in (settings or {}).items():
        if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
            merged_settings[section].update(values)
        else:
            merged_settings[section] = values
    return merged_settings


def _env_flag(value):
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(settings, environ=None):
    """Environment variables win over the YAML file."""
    environ = os.environ if environ is None else environ

    if "TESTMODE" in environ:
        settings["portal"]["test_mode"] = _env_flag(environ["TESTMODE"])
    if environ.get("RESEND_COOLDOWN_SECONDS"):
        settings["verification"]["resend_cooldown_seconds"] = int(environ["RESEND_COOLDOWN_SECONDS"])
    if environ.get("COOLDOWN_BACKEND"):
        settings["cooldown"]["backend"] = environ["COOLDOWN_BACKEND"]
    if environ.get("REDIS_URL"):
        settings["cooldown"]["redis_url"] = environ["REDIS_URL"]
    if environ.get("SMS_UID"):
        settings["sms"]["uid"] = environ["SMS_UID"]
    if environ.get("SMS_PWD"):
        settings["sms"]["pwd"] = environ["SMS_PWD"]
    return settings


def build_settings(overrides=None, environ=None):
    """Defaults + overrides + environment, without touching the config file."""
    return apply_env_overrides(_merge_defaults(overrides), environ)


def load_settings(force=False):
    global _cached_settings

    if _cached_settings and not force:
        return _cached_settings

    if os.path.exists(CONFIG_FILE):
        logger.debug(f"Reading configuration file: {CONFIG_FILE}")
        with open(CONFIG_FILE, "r") as yaml_file:
            settings = _merge_defaults(yaml.safe_load(yaml_file) or {})
    else:
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        os.makedirs(CONFIG_DIR, exist_ok=True)
        with open(CONFIG_FILE, "w") as yaml_file:
            yaml.dump(settings, yaml_file, allow_unicode=True)
        logger.info(f"Default configuration written to {CONFIG_FILE}")

    _cached_settings = apply_env_overrides(settings)
    return _cached_settings


def is_test_mode(settings):
    return bool(settings["portal"].get("test_mode"))


def resend_cooldown_seconds(settings):
    """Cooldown between code issuances; always 0 in test mode."""
    if is_test_mode(settings):
        return 0
    return max(0, int(settings["verification"].get("resend_cooldown_seconds", 60)))

