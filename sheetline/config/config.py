import os

import yaml
from dotenv import dotenv_values

from sheetline.utils.logging_setup import LEVEL_NAMES

CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))


def get_default_config():
    """Get default configuration"""
    return {
        # Remote store
        "endpoint": "https://script.google.com/macros/s/AKfycbyiINN08iExnzgRMLgTNFxYy6VAPmgyZWZgjp-bIDub-oJyWmckij8m4dyv8X-JvO3-/exec",
        "request_timeout_sec": None,  # None waits forever
        "header_rows": 1,
        "use_sample_on_error": True,

        # Rendering
        "viewport_width": 1280,

        # Logging
        "log_file": "logs/sheetline.log",
        "log_level": "INFO",

        # Server
        "server_host": "0.0.0.0",
        "server_port": 8000,
    }


def _find_config_file(config_dir=CONFIG_DIR):
    config_path = os.path.join(config_dir, "config.yaml")
    if not os.path.exists(config_path):
        config_path = os.path.join(config_dir, "config.example.yaml")
    return config_path if os.path.exists(config_path) else None


def _find_env_file():
    package_root = os.path.dirname(CONFIG_DIR)
    project_root = os.path.dirname(package_root)
    env_candidates = [
        os.path.join(package_root, ".env"),
        os.path.join(project_root, ".env"),
    ]
    return next((p for p in env_candidates if os.path.exists(p)), None)


def _as_bool(value):
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_timeout(value):
    value = str(value).strip()
    if not value or value.lower() in ("none", "null", "0"):
        return None
    return float(value)


def apply_env_overrides(config, env_vars):
    """
    Override configuration values with SHEETLINE_* variables.
    """
    if env_vars.get("SHEETLINE_ENDPOINT"):
        config["endpoint"] = env_vars["SHEETLINE_ENDPOINT"].strip()
    if "SHEETLINE_TIMEOUT_SEC" in env_vars:
        config["request_timeout_sec"] = _as_timeout(env_vars["SHEETLINE_TIMEOUT_SEC"])
    if env_vars.get("SHEETLINE_VIEWPORT_WIDTH"):
        config["viewport_width"] = int(env_vars["SHEETLINE_VIEWPORT_WIDTH"])
    if "SHEETLINE_USE_SAMPLE_ON_ERROR" in env_vars:
        config["use_sample_on_error"] = _as_bool(env_vars["SHEETLINE_USE_SAMPLE_ON_ERROR"])
    if env_vars.get("SHEETLINE_LOG_FILE"):
        config["log_file"] = env_vars["SHEETLINE_LOG_FILE"]
    if env_vars.get("SHEETLINE_LOG_LEVEL"):
        config["log_level"] = env_vars["SHEETLINE_LOG_LEVEL"]
    if env_vars.get("SHEETLINE_HOST"):
        config["server_host"] = env_vars["SHEETLINE_HOST"]
    if env_vars.get("SHEETLINE_PORT"):
        config["server_port"] = int(env_vars["SHEETLINE_PORT"])
    return config


def load_config(config_path=None, env_path=None, environ=None):
    """
    Load configuration: defaults, then YAML file, then .env, then process environment.
    """
    config = get_default_config()

    config_path = config_path or _find_config_file()
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        for key, value in file_config.items():
            if key in config:
                config[key] = value

    env_path = env_path or _find_env_file()
    env_vars = {}
    if env_path:
        env_vars.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
    env_vars.update(os.environ if environ is None else environ)
    apply_env_overrides(config, env_vars)

    if int(config["header_rows"]) < 0:
        raise ValueError("header_rows must be >= 0")
    if int(config["viewport_width"]) <= 0:
        raise ValueError("viewport_width must be positive")
    config["log_level"] = str(config["log_level"]).strip().upper()
    if config["log_level"] not in LEVEL_NAMES:
        raise ValueError(f"log_level must be one of {', '.join(LEVEL_NAMES)}, got {config['log_level']!r}")
    return config
