"""Shared utilities: logging, JSON helpers and generic CRUD."""

from .json_utils import dumps, loads, loads_object
from .logger import configure_logging, get_logger

__all__ = ["configure_logging", "dumps", "get_logger", "loads", "loads_object"]
