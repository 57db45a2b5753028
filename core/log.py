"""
Logging setup shared by the app factory and the services.
"""
import asyncio
import logging


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_logger(area: str) -> logging.Logger:
    return logging.getLogger(f"miq.{area}")


def log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Log unretrieved task exceptions instead of letting them go to stderr."""
    exc = context.get("exception")
    get_logger("process").error(
        "Unhandled async error: %s", context.get("message", "no message"),
        exc_info=exc,
    )
