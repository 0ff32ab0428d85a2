# =============================================================================
# core/config.py  -  Server settings from the environment
# =============================================================================
#
# All knobs are environment variables (optionally set in a .env file at the
# project root).  Nothing here touches MCP; the settings object is built
# once in main.py and handed to the pieces that need it.
#
#   SUPPORT_DATA_PATH              dataset JSON; relative paths are resolved
#                                  against the project root
#                                  (default: the bundled core/data/customers.json)
#   SUPPORT_SERVER_NAME            MCP server identity
#   SUPPORT_LOG_LEVEL              DEBUG / INFO / WARNING ...
#   SUPPORT_TRANSPORT              stdio (default), http, sse
#   SUPPORT_DEFAULT_RESPONSE_TIME  target used when a tier has no rule
# =============================================================================

import os
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
# Bundled as package data of `core`.
DEFAULT_DATA_PATH = Path(str(files("core") / "data" / "customers.json"))
DEFAULT_SERVER_NAME = "mcp-enterprise-support"
DEFAULT_RESPONSE_TIME = "24 hours"

_VALID_TRANSPORTS = {"stdio", "http", "sse", "streamable-http"}


@dataclass(frozen=True)
class Settings:
    data_path: Path = DEFAULT_DATA_PATH
    server_name: str = DEFAULT_SERVER_NAME
    log_level: str = "INFO"
    transport: str = "stdio"
    default_response_time: str = DEFAULT_RESPONSE_TIME

    @classmethod
    def from_env(cls, env_file: str | Path = ".env") -> "Settings":
        """Build settings from os.environ, loading `env_file` first if it exists.

        Values already present in the environment win over the .env file.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        transport = os.getenv("SUPPORT_TRANSPORT", "stdio").strip().lower()
        if transport not in _VALID_TRANSPORTS:
            raise ValueError(
                f"SUPPORT_TRANSPORT must be one of {sorted(_VALID_TRANSPORTS)}, got '{transport}'"
            )

        data_path = os.getenv("SUPPORT_DATA_PATH")
        resolved = DEFAULT_DATA_PATH
        if data_path:
            resolved = Path(data_path).expanduser()
            if not resolved.is_absolute():
                resolved = PROJECT_ROOT / resolved
        return cls(
            data_path=resolved,
            server_name=os.getenv("SUPPORT_SERVER_NAME", DEFAULT_SERVER_NAME),
            log_level=os.getenv("SUPPORT_LOG_LEVEL", "INFO").upper(),
            transport=transport,
            default_response_time=os.getenv(
                "SUPPORT_DEFAULT_RESPONSE_TIME", DEFAULT_RESPONSE_TIME
            ),
        )
