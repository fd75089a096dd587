"""Configuration commands for agile board CLI."""

import os
from typing import Any

import yaml
from cyclopts import App

from agile_board.client import DEFAULT_TIMEOUT
from agile_board.config import DEFAULT_GATEWAY_URL, GATEWAY_URL_ENV, Config, get_config
from agile_board.datasource import LIVE, SIMULATED

config_app = App(name="config", help="Show and change gateway and data source settings")

# Settings the CLI reads, with the value used when nothing is configured.
DEFAULTS: dict[str, Any] = {
    "gateway.url": DEFAULT_GATEWAY_URL,
    "gateway.timeout": DEFAULT_TIMEOUT,
    "data_source": LIVE,
}


def parse_value(value: str) -> object:
    """Read a command line value as YAML so numbers and booleans keep their type."""
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    return parsed if isinstance(parsed, (str, int, float, bool)) else value


def check_value(key: str, value: object) -> str | None:
    """Return why a value cannot be stored under key, or None when it can."""
    if key == "data_source" and value not in (LIVE, SIMULATED):
        return f"Unknown data source: {value}. Use '{LIVE}' or '{SIMULATED}'"
    if key == "gateway.timeout" and (isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0):
        return f"Invalid timeout: {value}. Use a number of seconds greater than zero"
    return None


def describe(config: Config, key: str) -> tuple[Any, str | None]:
    """Return the value the CLI uses for key and where it comes from.

    The origin is "environment", "local", "global", "default", or None when
    the key is neither configured nor known.
    """
    if key == "gateway.url" and os.environ.get(GATEWAY_URL_ENV):
        return os.environ[GATEWAY_URL_ENV], "environment"
    origin = config.origin(key)
    if origin is not None:
        return config.get(key), origin
    if key in DEFAULTS:
        return DEFAULTS[key], "default"
    return None, None


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Common keys: gateway.url, gateway.timeout, data_source (live or simulated).

    Args:
        key: Configuration key
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    parsed = parse_value(value)
    problem = check_value(key, parsed)
    if problem:
        print(problem)
        return

    config = get_config(use_global=global_)
    config.set(key, parsed)
    scope = "global" if global_ else "local"
    print(f"Set {key} = {parsed} ({scope})")
    if key == "gateway.url" and os.environ.get(GATEWAY_URL_ENV):
        print(f"Note: {GATEWAY_URL_ENV} is set and takes precedence")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Remove a setting and show the value used from now on."""
    config = get_config(use_global=global_)
    scope = "global" if global_ else "local"
    if config.origin(key) != scope:
        print(f"{key} is not set in {scope} config")
        return

    config.unset(key)
    print(f"Unset {key} ({scope})")
    value, origin = describe(get_config(use_global=global_), key)
    if origin is not None:
        print(f"{key} is now {value} ({origin})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the value used for a setting and where it comes from."""
    value, origin = describe(get_config(use_global=global_), key)
    if origin is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {value} ({origin})")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List the effective gateway and data source settings, then any other stored keys.

    Args:
        global_: If True, describe the global config only. If False, the merged config.
    """
    config = get_config(use_global=global_)
    print(f"{'Global' if global_ else 'Effective'} settings:\n")
    for key in DEFAULTS:
        value, origin = describe(config, key)
        print(f"{key} = {value} ({origin})")

    others = {key: value for key, value in config.list().items() if key not in DEFAULTS}
    if others:
        print()
        for key, value in others.items():
            print(f"{key} = {value} ({config.origin(key)})")


@config_app.command
def path(global_: bool = False) -> None:
    """Show where the configuration file is stored."""
    config = get_config(use_global=global_)
    print(config.config_file)
