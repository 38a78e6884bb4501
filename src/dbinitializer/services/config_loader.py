"""Configuration loader for dbinitializer."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dbinitializer.errors import InitializerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "ddl_locations",
        "dml_locations",
        "continue_on_error",
        "separator",
        "encoding",
        "sqlite",
        "psql_database",
        "psql_user",
        "psql_host",
        "psql_port",
        "psql_timeout",
        "resource_roots",
        "allow_insecure_http",
        "download_timeout",
        "report_file",
        "verbose",
        "log_file",
    }
    LIST_KEYS = {"ddl_locations", "dml_locations", "resource_roots"}
    BOOL_KEYS = {"continue_on_error", "allow_insecure_http", "verbose"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InitializerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InitializerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InitializerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InitializerError(f"Unknown configuration keys: {unknown_list}")

        for key in self.LIST_KEYS & set(parsed):
            value = parsed[key]
            if isinstance(value, str):
                parsed[key] = [value]
            elif not isinstance(value, list):
                raise InitializerError(f"Configuration key '{key}' must be a list of strings.")

        for key in self.BOOL_KEYS & set(parsed):
            if not isinstance(parsed[key], bool):
                raise InitializerError(
                    f"Configuration key '{key}' must be true or false, got {parsed[key]!r}."
                )

        return parsed
