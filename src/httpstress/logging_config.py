# httpstress/logging_config.py
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

_console = Console()


def get_console() -> Console:
    """Console shared by the log handler and the progress bar.

    Log records written through it while a progress bar is live are printed
    above the bar instead of into it.
    """
    return _console


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """
    Configure the root logger to render through a rich console.
    If log_file is provided, also log plain lines to that file.
    """
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = RichHandler(
        console=console or get_console(),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    console_handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    return logger
