"""
Logger Utility Module

This module provides functions for setting up and configuring the application logger.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from outlook_mcp.utils.config import get_config


def get_log_level() -> str:
    """
    Get the log level from the configuration.

    Returns:
        str: The log level (INFO by default).
    """
    return str(get_config().get("log_level") or "INFO")


def get_log_file_path() -> Path:
    """
    Get the log file path from config or default.

    Returns:
        Path: The log file path.
    """
    log_path = get_config().get("log_file")
    if log_path:
        return Path(log_path).expanduser()

    # Default to ~/.outlook-mcp/outlook-mcp.log
    default_path = Path.home() / ".outlook-mcp" / "outlook-mcp.log"
    default_path.parent.mkdir(parents=True, exist_ok=True)
    return default_path


def setup_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Set up and configure a logger.

    Console output goes to stderr because stdout carries the MCP stdio protocol.

    Args:
        name (Optional[str], optional): The name of the logger. Defaults to None.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name or "outlook_mcp")

    # Avoid adding duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    log_level = getattr(logging, get_log_level().upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        file_handler = logging.FileHandler(get_log_file_path())
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError:
        logger.warning("Log file is not writable, logging to stderr only")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The logger.
    """
    return logging.getLogger(name)
