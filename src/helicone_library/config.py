# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Configuration resolution and credential storage.

Precedence (highest to lowest):
1. CLI flags (--api-key, --region, --mode, ...)
2. Environment variables (HELICONE_API_KEY, HELICONE_REGION, ...)
3. Stored config file (~/.helicone/config.env, dotenv format)
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values, set_key, unset_key

from .core.constants import (
    DEFAULT_MODE,
    DEFAULT_REGION,
    DEFAULT_SAMPLE_LIMITS,
    MODES,
    REGIONS,
)
from .core.errors import ConfigError
from .core.types import AuthContext, GatewayContext

lib_logger = logging.getLogger("helicone_library")

CONFIG_FILE_NAME = "config.env"

API_KEY_VAR = "HELICONE_API_KEY"
REGION_VAR = "HELICONE_REGION"
MODE_VAR = "HELICONE_MODE"
GATEWAY_URL_VAR = "HELICONE_GATEWAY_URL"
GATEWAY_TOKEN_VAR = "HELICONE_GATEWAY_TOKEN"

# Checked in order before the stored config
GATEWAY_URL_ENV = ("GATEWAY_URL", GATEWAY_URL_VAR)
GATEWAY_TOKEN_ENV = ("GATEWAY_TOKEN", GATEWAY_TOKEN_VAR)

SAMPLE_LIMIT_VARS = {
    "raw": "HELICONE_SAMPLE_LIMIT",
    "gateway": "HELICONE_GATEWAY_SAMPLE_LIMIT",
}


def get_config_dir() -> Path:
    """Config directory, overridable with HELICONE_CONFIG_DIR."""
    override = os.environ.get("HELICONE_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".helicone"


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def _ensure_config_file() -> Path:
    config_dir = get_config_dir()
    config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    path = config_dir / CONFIG_FILE_NAME
    if not path.is_file():
        path.touch(mode=0o600)
    return path


def load_config() -> Dict[str, str]:
    """Read the stored config. A missing or unreadable file reads as empty."""
    path = get_config_path()
    if not path.is_file():
        return {}
    try:
        values = dotenv_values(path)
    except OSError as e:
        lib_logger.warning(f"Could not read config file {path}: {e}")
        return {}
    return {k: v for k, v in values.items() if v is not None}


def store_values(values: Dict[str, str]) -> Path:
    path = _ensure_config_file()
    for key, value in values.items():
        set_key(str(path), key, value)
    os.chmod(path, 0o600)
    return path


def remove_values(*keys: str) -> None:
    path = get_config_path()
    if not path.is_file():
        return
    stored = load_config()
    for key in keys:
        if key in stored:
            unset_key(str(path), key)


def _from_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def _resolve(cli_value: Optional[str], env_names, config_key: str) -> Optional[str]:
    if cli_value:
        return cli_value
    value = _from_env(*env_names)
    if value:
        return value
    return load_config().get(config_key) or None


# =============================================================================
# RESOLVERS
# =============================================================================


def get_api_key(cli_api_key: Optional[str] = None) -> Optional[str]:
    return _resolve(cli_api_key, (API_KEY_VAR,), API_KEY_VAR)


def get_region(cli_region: Optional[str] = None) -> str:
    for candidate in (cli_region, os.environ.get(REGION_VAR), load_config().get(REGION_VAR)):
        if candidate in REGIONS:
            return candidate
    return DEFAULT_REGION


def get_mode(cli_mode: Optional[str] = None) -> str:
    for candidate in (cli_mode, os.environ.get(MODE_VAR), load_config().get(MODE_VAR)):
        if candidate in MODES:
            return candidate
    return DEFAULT_MODE


def get_gateway_url(cli_url: Optional[str] = None) -> Optional[str]:
    return _resolve(cli_url, GATEWAY_URL_ENV, GATEWAY_URL_VAR)


def get_gateway_token(cli_token: Optional[str] = None) -> Optional[str]:
    return _resolve(cli_token, GATEWAY_TOKEN_ENV, GATEWAY_TOKEN_VAR)


def get_sample_limit(mode: str) -> int:
    """
    Aggregation sample bound for a connection mode.

    The bound is policy rather than an invariant, so it can be overridden per
    mode through the environment or the stored config.
    """
    default = DEFAULT_SAMPLE_LIMITS.get(mode, DEFAULT_SAMPLE_LIMITS[DEFAULT_MODE])
    var = SAMPLE_LIMIT_VARS.get(mode)
    if not var:
        return default
    raw = os.environ.get(var) or load_config().get(var)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        lib_logger.warning(f"Invalid {var} value '{raw}', using default {default}")
        return default
    if value <= 0:
        lib_logger.warning(f"{var} must be positive, using default {default}")
        return default
    return value


def get_auth_context(
    cli_api_key: Optional[str] = None, cli_region: Optional[str] = None
) -> AuthContext:
    """
    Resolve direct-mode credentials.

    Raises:
        ConfigError: If no API key is configured anywhere
    """
    api_key = get_api_key(cli_api_key)
    if not api_key:
        raise ConfigError(
            "No API key found. Set HELICONE_API_KEY environment variable, "
            "use --api-key flag, or run 'helicone auth login'"
        )
    return AuthContext(api_key=api_key, region=get_region(cli_region))


def get_gateway_context(
    cli_url: Optional[str] = None, cli_token: Optional[str] = None
) -> GatewayContext:
    """
    Resolve gateway-mode credentials.

    Raises:
        ConfigError: If the URL or token is missing
    """
    base_url = get_gateway_url(cli_url)
    if not base_url:
        raise ConfigError(
            "Gateway URL not configured. Set --gateway-url, GATEWAY_URL, or store in config."
        )
    token = get_gateway_token(cli_token)
    if not token:
        raise ConfigError(
            "Gateway token not configured. Set --gateway-token, GATEWAY_TOKEN, or store in config."
        )
    return GatewayContext(base_url=base_url, token=token)


# =============================================================================
# STORAGE
# =============================================================================


def store_api_key(api_key: str, region: Optional[str] = None) -> Path:
    values = {API_KEY_VAR: api_key}
    if region:
        values[REGION_VAR] = region
    return store_values(values)


def store_gateway_credentials(
    gateway_url: str, gateway_token: str, mode: str = "gateway"
) -> Path:
    return store_values(
        {
            GATEWAY_URL_VAR: gateway_url,
            GATEWAY_TOKEN_VAR: gateway_token,
            MODE_VAR: mode,
        }
    )


def clear_credentials() -> None:
    remove_values(API_KEY_VAR)


def clear_gateway_credentials() -> None:
    remove_values(GATEWAY_URL_VAR, GATEWAY_TOKEN_VAR)


def has_stored_credentials() -> bool:
    return bool(load_config().get(API_KEY_VAR))


def mask_secret(secret: str) -> str:
    """Show the first and last four characters only."""
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"
