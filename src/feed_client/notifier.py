"""Non-blocking user notifications (toast equivalents)."""
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Surface short messages to the user without interrupting them."""

    def error(self, message: str) -> None:
        """Show an error message."""
        ...

    def success(self, message: str) -> None:
        """Show a confirmation message."""
        ...


class LoggingNotifier:
    """Notifier that writes messages to the log. Used when no UI is attached."""

    def error(self, message: str) -> None:
        """Log an error message."""
        logger.warning("notify_error message=%s", message)

    def success(self, message: str) -> None:
        """Log a confirmation message."""
        logger.info("notify_success message=%s", message)
