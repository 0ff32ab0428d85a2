# =============================================================================
# main.py  -  Entry Point for the Enterprise Support MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py            (stdio transport, for an MCP client)
#   enterprise-support-mcp           (same, via the installed script)
#
# WHAT HAPPENS:
#   1. Settings are read from the environment / .env (core/config.py)
#   2. Logging is pointed at STDERR
#   3. The dataset is loaded into a RecordStore ONCE
#      → if it cannot be read or validated, the process exits with status 1
#        and never starts serving
#   4. The FastMCP server is built around that store and run
#
# After step 3 nothing reads the disk again; every tool call is a pure read
# over the in-memory store.
# =============================================================================

import logging
import sys

from core.config import PROJECT_ROOT, Settings
from core.errors import DataLoadError
from core.store import load_store
from tools.mcp_server import configure_logging, create_server

logger = logging.getLogger("main")


def main() -> int:
    settings = Settings.from_env(PROJECT_ROOT / ".env")
    configure_logging(settings.log_level)

    try:
        store = load_store(settings.data_path)
    except DataLoadError as exc:
        logger.error("Failed to load customer database: %s", exc)
        return 1

    mcp = create_server(store, settings)
    logger.info(
        "%s running on %s (%d customers)",
        settings.server_name, settings.transport, len(store.customers),
    )
    mcp.run(transport=settings.transport)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
