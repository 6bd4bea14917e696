"""
_logging.py

Shared progress-logging helper for the pipeline components.
"""

from __future__ import annotations

from typing import Callable, Optional


class LoggingMixin:
    """
    Adds ``_log`` to a component that stores an optional ``logger``
    callable (``Callable[[str], None]``).
    """

    logger: Optional[Callable[[str], None]] = None

    def _log(self, message: str, verbose: bool = True) -> None:
        """
        Internal logging helper.

        Routes messages to the user-supplied logger if present, otherwise
        falls back to `print`. Controlled by the `verbose` flag.
        """
        if not verbose:
            return
        if self.logger is not None:
            self.logger(message)
        else:
            print(message)
