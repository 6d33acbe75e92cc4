from __future__ import annotations

# produce_api/config.py
import os
from dataclasses import dataclass

import yaml

from .errors import ConfigError

# Resolution order for every key:
# 1) environment variable (highest priority)
# 2) config.yaml at the project root
# 3) built-in default
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_CONFIG_YAML = os.path.join(_PROJECT_ROOT, "config.yaml")

MEMORY = ":memory:"
DRIVERS = ("sqlite3", "sqlalchemy")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def default_db_path() -> str:
    return os.path.join(os.getcwd(), "data", "db.sqlite")


@dataclass
class Settings:
    db_path: str | None = None
    db_driver: str = "sqlite3"
    host: str = "127.0.0.1"
    port: int = 3000
    enable_test_routes: bool = True
    log_level: str = "INFO"


def _read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or _CONFIG_YAML
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    return cfg


def _as_bool(value, key: str) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"invalid boolean for {key}: {value!r}")


def _as_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise ConfigError(f"port out of range: {port}")
    return port


def load_settings(config_path: str | None = None, environ: dict | None = None) -> Settings:
    env = os.environ if environ is None else environ
    cfg = _read_config_yaml(config_path)

    def pick(env_key: str, cfg_key: str):
        v = env.get(env_key)
        if v is not None and str(v).strip():
            return str(v).strip()
        v = cfg.get(cfg_key)
        if isinstance(v, str):
            return v.strip() or None
        return v

    out = Settings()

    db_path = pick("PRODUCE_DB_PATH", "db_path")
    if db_path:
        out.db_path = str(db_path)

    driver = pick("PRODUCE_DB_DRIVER", "db_driver")
    if driver:
        driver = str(driver).lower()
        if driver not in DRIVERS:
            raise ConfigError(f"unknown db driver: {driver}")
        out.db_driver = driver

    host = pick("HOST", "host")
    if host:
        out.host = str(host)

    port = pick("PORT", "port")
    if port is not None:
        out.port = _as_port(port)

    # The reset route wipes the table, so production deployments never mount it
    test_routes = pick("PRODUCE_ENABLE_TEST_ROUTES", "enable_test_routes")
    if test_routes is not None:
        out.enable_test_routes = _as_bool(test_routes, "enable_test_routes")
    else:
        out.enable_test_routes = env.get("APP_ENV", "dev").lower() not in ("prod", "production")

    level = pick("LOG_LEVEL", "log_level")
    if level:
        out.log_level = str(level).upper()

    return out
