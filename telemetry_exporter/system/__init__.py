"""Pacote system: helpers de sistema e logging.

Re-exports úteis para os demais subpacotes.
"""

from .helpers import parse_bind_address
from .log_helpers import ThrottledLogger
from .logs import setup_logging

__all__ = ["parse_bind_address", "ThrottledLogger", "setup_logging"]
