import logging
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback
from scimpatch.config import Settings, settings


LOGGER_NAME = "scimpatch"

# Tortoise only serves company lookups, its SQL is worth seeing when debugging
DATABASE_LOGGERS = ("tortoise", "tortoise.db_client", "aiosqlite")


def setup_logging(config: Settings = settings) -> logging.Logger:
    """
    Route log records through rich and apply the levels from ``config``.

    The root handler is installed once. Levels are reapplied on every call so
    that an app built with its own settings gets its own verbosity.
    """
    install_rich_traceback(show_locals=config.debug, suppress=[])
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                tracebacks_show_locals=config.debug,
                show_path=config.debug,
            )
        ],
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(config.log_level)

    database_level = logging.DEBUG if config.log_level == "DEBUG" else logging.WARNING
    for name in DATABASE_LOGGERS:
        logging.getLogger(name).setLevel(database_level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if config.is_production else logging.INFO)
    return package_logger


logger = setup_logging()
