"""
Configuration management for the repository digest tool.

Provides centralized configuration for all pipeline stages with
sensible defaults and validation.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gitdigest.core.options import OutputFormat, ProcessOptions


@dataclass
class FetchConfig:
    """Configuration for repository fetching."""

    # Clone depth for remote repositories (0 = full clone)
    clone_depth: int = 1

    # Timeout for git operations (seconds, 0 = no timeout)
    git_timeout: int = 300

    # Git executable to invoke
    git_binary: str = "git"


@dataclass
class WorkspaceConfig:
    """Configuration for ephemeral workspaces."""

    # Parent directory for workspaces (None = system temp dir)
    base_dir: Optional[str] = None

    # Prefix for workspace directory names
    prefix: str = "gitdigest-"


@dataclass
class SmartFilterConfig:
    """Thresholds for the heuristic noise filter."""

    # Decoded content shorter than this is treated as noise
    min_content_length: int = 10

    # Decoded content longer than this is treated as a generated blob
    max_content_length: int = 50000

    # Number of leading characters scanned for generated-file markers
    head_length: int = 500


@dataclass
class DefaultOptionsConfig:
    """Defaults applied by callers when a request omits an option."""

    include_tests: bool = True
    include_docs: bool = True
    smart_filter: bool = True
    max_file_size: int = 50 * 1024  # 50KB
    output_format: str = "markdown"

    def to_options(self) -> ProcessOptions:
        """Convert to a ProcessOptions value."""
        return ProcessOptions(
            include_tests=self.include_tests,
            include_docs=self.include_docs,
            smart_filter=self.smart_filter,
            max_file_size=self.max_file_size,
            output_format=OutputFormat.parse(self.output_format),
        )


@dataclass
class ServiceConfig:
    """Configuration for the HTTP handler."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class DigestConfig:
    """Master configuration combining all stage configurations."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    smart_filter: SmartFilterConfig = field(default_factory=SmartFilterConfig)
    defaults: DefaultOptionsConfig = field(default_factory=DefaultOptionsConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)

    # Enable verbose logging
    verbose: bool = False


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: DigestConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = DigestConfig()
        return cls._instance

    @classmethod
    def get(cls) -> DigestConfig:
        """Get the current configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> DigestConfig:
        """Restore the built-in defaults."""
        instance = cls()
        instance._config = DigestConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> DigestConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded DigestConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls) -> DigestConfig:
        """
        Load configuration from environment variables.

        Variables are read from the process environment and from a
        ``.env`` file if present, and are prefixed with GITDIGEST_.

        Returns:
            DigestConfig with environment overrides applied.
        """
        load_dotenv()

        instance = cls()
        config = instance._config

        if os.getenv("GITDIGEST_GIT_TIMEOUT"):
            config.fetch.git_timeout = int(os.getenv("GITDIGEST_GIT_TIMEOUT"))

        if os.getenv("GITDIGEST_CLONE_DEPTH"):
            config.fetch.clone_depth = int(os.getenv("GITDIGEST_CLONE_DEPTH"))

        if os.getenv("GITDIGEST_WORKSPACE_DIR"):
            config.workspace.base_dir = os.getenv("GITDIGEST_WORKSPACE_DIR")

        # Override request defaults
        if os.getenv("GITDIGEST_MAX_FILE_SIZE"):
            config.defaults.max_file_size = int(os.getenv("GITDIGEST_MAX_FILE_SIZE"))

        if os.getenv("GITDIGEST_OUTPUT_FORMAT"):
            config.defaults.output_format = os.getenv("GITDIGEST_OUTPUT_FORMAT")

        if os.getenv("GITDIGEST_HOST"):
            config.service.host = os.getenv("GITDIGEST_HOST")

        if os.getenv("GITDIGEST_PORT"):
            config.service.port = int(os.getenv("GITDIGEST_PORT"))

        # Override verbosity
        if os.getenv("GITDIGEST_VERBOSE"):
            config.verbose = os.getenv("GITDIGEST_VERBOSE").lower() in ("true", "1", "yes")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> DigestConfig:
        """Convert a dictionary to DigestConfig."""
        config = DigestConfig()

        if "fetch" in data:
            config.fetch = FetchConfig(**data["fetch"])

        if "workspace" in data:
            config.workspace = WorkspaceConfig(**data["workspace"])

        if "smart_filter" in data:
            config.smart_filter = SmartFilterConfig(**data["smart_filter"])

        if "defaults" in data:
            config.defaults = DefaultOptionsConfig(**data["defaults"])

        if "service" in data:
            config.service = ServiceConfig(**data["service"])

        if "verbose" in data:
            config.verbose = data["verbose"]

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config = cls.get()
        data = cls._config_to_dict(config)

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: DigestConfig) -> dict:
        """Convert DigestConfig to a dictionary."""
        return {
            "fetch": {
                "clone_depth": config.fetch.clone_depth,
                "git_timeout": config.fetch.git_timeout,
                "git_binary": config.fetch.git_binary,
            },
            "workspace": {
                "base_dir": config.workspace.base_dir,
                "prefix": config.workspace.prefix,
            },
            "smart_filter": {
                "min_content_length": config.smart_filter.min_content_length,
                "max_content_length": config.smart_filter.max_content_length,
                "head_length": config.smart_filter.head_length,
            },
            "defaults": {
                "include_tests": config.defaults.include_tests,
                "include_docs": config.defaults.include_docs,
                "smart_filter": config.defaults.smart_filter,
                "max_file_size": config.defaults.max_file_size,
                "output_format": config.defaults.output_format,
            },
            "service": {
                "host": config.service.host,
                "port": config.service.port,
            },
            "verbose": config.verbose,
        }
