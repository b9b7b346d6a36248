"""
Core module containing configuration, options, and exceptions.

Pipeline orchestration lives in ``gitdigest.core.pipeline``.
"""

from gitdigest.core.config import Config, DigestConfig
from gitdigest.core.options import OutputFormat, ProcessOptions
from gitdigest.core.exceptions import (
    DigestError,
    InvalidInputError,
    InvalidSourceError,
    InvalidOptionsError,
    FetchError,
    FileAccessError,
    SerializationError,
    ProcessingError,
    WorkspaceError,
)

__all__ = [
    "Config",
    "DigestConfig",
    "OutputFormat",
    "ProcessOptions",
    "DigestError",
    "InvalidInputError",
    "InvalidSourceError",
    "InvalidOptionsError",
    "FetchError",
    "FileAccessError",
    "SerializationError",
    "ProcessingError",
    "WorkspaceError",
]
