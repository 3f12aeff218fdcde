import logging

import uvicorn

from drumfeed.api import main as api_main

logger = logging.getLogger("drumfeed.server")

UVICORN_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def uvicorn_log_level(level_name: str) -> str:
    """
    Maps a LOG_LEVEL value onto uvicorn's level names.
    Aliases such as WARN or FATAL go through logging's own table.
    """
    name = level_name.strip().lower()
    if name in UVICORN_LOG_LEVELS:
        return name

    level = logging.getLevelName(name.upper())
    if isinstance(level, int):
        return logging.getLevelName(level).lower()
    return "info"


def main():
    # Serve the module-level app: settings, logging and telemetry are set up once
    app = api_main.app
    settings = app.state.settings

    logger.info(
        f"Oracle Data Provider starting on port {settings.port} in {settings.app_env} mode"
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=uvicorn_log_level(settings.log_level),
    )


if __name__ == "__main__":
    main()
