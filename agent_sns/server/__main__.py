"""
API server process: ``python -m agent_sns.server``.

Binds to ``AGENT_SNS_SERVER_HOST`` and ``AGENT_SNS_SERVER_PORT``. Logging is
left to ``setup_logging`` rather than uvicorn's own configuration.
"""

import uvicorn

from agent_sns.server.core.config import settings

APP_PATH = "agent_sns.server.main:app"


def main() -> None:
    uvicorn.run(APP_PATH, host=settings.server_host, port=settings.server_port, log_config=None)


if __name__ == "__main__":
    main()
