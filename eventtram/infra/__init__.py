"""
Infrastructure - logging and inter-process conduits
"""

from eventtram.infra.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
