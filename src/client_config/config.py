"""API client configuration from YAML file.

Loads the ``client:`` section of config.yaml:
- Backend origin and per-call deadlines
- Retry defaults for transport failures
- Login / upsell destinations and auth endpoints
- Durable credential file and idle timeout

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and a few well-known variables (API_BASE_URL, API_TIMEOUT_MS, ...) override
the file outright.
"""

import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from client_core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Default config file: config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

# Environment variables that override YAML values: env var -> field name
ENV_OVERRIDES = {
    "API_BASE_URL": "base_url",
    "API_TIMEOUT_MS": "request_timeout_ms",
    "API_RETRIES": "retries",
    "API_RETRY_DELAY_MS": "retry_delay_ms",
    "SESSION_TIMEOUT_MINUTES": "session_timeout_minutes",
    "TOKEN_FILE": "token_file",
}


@dataclass
class ClientSettings:
    """API client configuration.

    Configuration structure:
        client:
          base_url: https://api.example.com
          request_timeout_ms: 15000
          logout_timeout_ms: 2000
          retries: 2
          retry_delay_ms: 1000
          login_path: /login
          upsell_path: /plans
          logout_endpoint: /api/auth/logout
          refresh_endpoint: /api/auth/refresh
          session_timeout_minutes: 30
          token_file: ""            # empty = keep the credential in memory only
          max_connections: 20

    All timing values in milliseconds unless otherwise noted.
    """

    base_url: str = "http://localhost:3000"

    # =========================================================================
    # DEADLINES AND RETRY
    # =========================================================================
    request_timeout_ms: int = 15000
    logout_timeout_ms: int = 2000
    retries: int = 2
    retry_delay_ms: int = 1000

    # =========================================================================
    # DESTINATIONS AND ENDPOINTS
    # =========================================================================
    login_path: str = "/login"
    upsell_path: str = "/plans"
    logout_endpoint: str = "/api/auth/logout"
    refresh_endpoint: str = "/api/auth/refresh"

    # =========================================================================
    # SESSION
    # =========================================================================
    session_timeout_minutes: float = 30
    token_file: str = ""
    max_connections: int = 20

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.base_url = str(self.base_url).rstrip("/")
        self.request_timeout_ms = int(self.request_timeout_ms)
        self.logout_timeout_ms = int(self.logout_timeout_ms)
        self.retries = int(self.retries)
        self.retry_delay_ms = int(self.retry_delay_ms)
        self.session_timeout_minutes = float(self.session_timeout_minutes)
        self.token_file = str(self.token_file or "")
        self.max_connections = int(self.max_connections)

    def validate(self) -> None:
        """Raise ConfigurationError listing every invalid setting."""
        errors = []

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(
                f"base_url must start with http:// or https://, got: {self.base_url!r}"
            )
        if self.request_timeout_ms <= 0:
            errors.append("request_timeout_ms must be greater than 0")
        if self.logout_timeout_ms <= 0:
            errors.append("logout_timeout_ms must be greater than 0")
        elif self.logout_timeout_ms >= self.request_timeout_ms:
            errors.append("logout_timeout_ms must be shorter than request_timeout_ms")
        if self.retries < 0:
            errors.append("retries must be 0 or greater")
        if self.retry_delay_ms < 0:
            errors.append("retry_delay_ms must be 0 or greater")
        if self.session_timeout_minutes <= 0:
            errors.append("session_timeout_minutes must be greater than 0")
        if self.max_connections < 1:
            errors.append("max_connections must be at least 1")

        path_fields = {
            "login_path": self.login_path,
            "upsell_path": self.upsell_path,
            "logout_endpoint": self.logout_endpoint,
            "refresh_endpoint": self.refresh_endpoint,
        }
        invalid_paths = [name for name, value in path_fields.items() if not value.startswith("/")]
        if invalid_paths:
            errors.append("paths must start with '/': " + ", ".join(invalid_paths))

        if errors:
            raise ConfigurationError("Invalid client configuration:\n  - " + "\n  - ".join(errors))


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ClientSettings:
    """Load client settings from config.yaml.

    An explicit config_path must exist. When no path is given and the
    default file is absent, dataclass defaults apply.

    Priority (highest to lowest): ``overrides`` argument, environment
    variables, YAML values, dataclass defaults.
    """
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    config_path = config_path or DEFAULT_CONFIG_FILE
    yaml_data = _expand_env_vars(load_yaml(config_path))
    if yaml_data:
        logger.info(
            f"Loading configuration from file: {config_path}",
            extra={"config_path": str(config_path)},
        )

    client_config = yaml_data.get("client", {}) if yaml_data else {}
    if not isinstance(client_config, dict):
        raise ConfigurationError("Invalid config file: 'client:' must be a mapping")

    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            client_config[field_name] = value

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        client_config = _deep_merge(client_config, overrides)

    known_fields = set(ClientSettings.__dataclass_fields__)
    unknown = sorted(set(client_config) - known_fields)
    if unknown:
        logger.warning(f"Ignoring unknown client settings: {unknown}")

    try:
        config = ClientSettings(
            **{k: v for k, v in client_config.items() if k in known_fields}
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid client configuration: {e}") from e

    config.validate()
    logger.debug(
        "Configuration loaded successfully",
        extra={"base_url": config.base_url, "timeout_ms": config.request_timeout_ms},
    )
    return config


_client_settings: Optional[ClientSettings] = None


def get_config() -> ClientSettings:
    """Get or load the singleton settings instance."""
    global _client_settings
    if _client_settings is None:
        _client_settings = load_config()
    return _client_settings


def set_config(config: ClientSettings) -> None:
    """Set the singleton settings instance (useful for testing)."""
    global _client_settings
    _client_settings = config


def reset_config() -> None:
    """Reset the singleton settings instance (forces reload on next get_config() call)."""
    global _client_settings
    _client_settings = None


def _build_cli_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="API client configuration tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate configuration
  python -m client_config.config --validate

  # Show effective settings
  python -m client_config.config --show

  # JSON output for automation
  python -m client_config.config --validate --json
        """,
    )
    parser.add_argument("--validate", action="store_true", help="Validate the configuration")
    parser.add_argument("--show", action="store_true", help="Print the effective settings")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of YAML/text")
    return parser


def _cli_main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for config validation and debugging."""
    parser = _build_cli_parser()
    args = parser.parse_args(argv)
    if not (args.validate or args.show):
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError, yaml.YAMLError) as e:
        if args.json:
            print(json.dumps({"valid": False, "error": str(e)}))
        else:
            print(f"Configuration invalid: {e}", file=sys.stderr)
        return 1

    if args.json:
        output: Dict[str, Any] = {"valid": True}
        if args.show:
            output["settings"] = asdict(config)
        print(json.dumps(output, indent=2))
        return 0

    if args.validate:
        print("Configuration valid")
    if args.show:
        print(yaml.safe_dump({"client": asdict(config)}, sort_keys=False), end="")
    return 0


if __name__ == "__main__":
    sys.exit(_cli_main())
