"""
Per-request processing options.

ProcessOptions is immutable for the lifetime of a request. The core
enforces no defaults of its own; callers that want defaults pass them
to ``ProcessOptions.from_dict``.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from gitdigest.core.exceptions import InvalidOptionsError


class OutputFormat(Enum):
    """Encodings the serializer can produce."""
    STRUCTURED = "structured"
    PLAINTEXT = "plaintext"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, value: Any) -> "OutputFormat":
        """Parse a format name, accepting the ``json``/``text`` wire aliases."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidOptionsError("outputFormat", "must be a string")

        name = value.strip().lower()
        name = _FORMAT_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise InvalidOptionsError(
                "outputFormat",
                f"unknown format '{value}' "
                f"(expected one of: {', '.join(f.value for f in cls)})",
            )


_FORMAT_ALIASES = {
    "json": "structured",
    "text": "plaintext",
    "txt": "plaintext",
    "md": "markdown",
}

# wire name -> attribute name
_FIELDS = {
    "includeTests": "include_tests",
    "includeDocs": "include_docs",
    "smartFilter": "smart_filter",
    "maxFileSize": "max_file_size",
    "outputFormat": "output_format",
}


@dataclass(frozen=True)
class ProcessOptions:
    """Filtering and rendering options for one digest request."""

    include_tests: bool
    include_docs: bool
    smart_filter: bool
    max_file_size: int
    output_format: OutputFormat

    def __post_init__(self):
        for wire_name in ("includeTests", "includeDocs", "smartFilter"):
            value = getattr(self, _FIELDS[wire_name])
            if not isinstance(value, bool):
                raise InvalidOptionsError(wire_name, "must be a boolean")

        size = self.max_file_size
        if isinstance(size, bool) or not isinstance(size, int):
            raise InvalidOptionsError("maxFileSize", "must be an integer")
        if size < 0:
            raise InvalidOptionsError("maxFileSize", "must not be negative")

        if not isinstance(self.output_format, OutputFormat):
            object.__setattr__(
                self, "output_format", OutputFormat.parse(self.output_format)
            )

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        defaults: Optional["ProcessOptions"] = None,
    ) -> "ProcessOptions":
        """
        Build options from a request payload.

        Both the wire names (``includeTests``) and attribute names
        (``include_tests``) are accepted. Fields missing from ``data`` are
        taken from ``defaults``; without defaults they are an error.

        Raises:
            InvalidOptionsError: If a field is missing or malformed.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidOptionsError("options", "must be an object")

        values = {}
        for wire_name, attr in _FIELDS.items():
            if wire_name in data:
                values[attr] = data[wire_name]
            elif attr in data:
                values[attr] = data[attr]
            elif defaults is not None:
                values[attr] = getattr(defaults, attr)
            else:
                raise InvalidOptionsError(wire_name, "is required")

        values["output_format"] = OutputFormat.parse(values["output_format"])
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "ProcessOptions":
        """Return a copy with the given attributes replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "includeTests": self.include_tests,
            "includeDocs": self.include_docs,
            "smartFilter": self.smart_filter,
            "maxFileSize": self.max_file_size,
            "outputFormat": self.output_format.value,
        }
