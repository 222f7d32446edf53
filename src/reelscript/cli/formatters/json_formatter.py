"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any


def _default(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    return str(value)


class JsonFormatter:
    """Generic JSON formatter for CLI output.

    Chinese text is written as-is rather than as ``\\u`` escapes.
    """

    def format(self, data: Any) -> str:
        """Format data as JSON.

        Args:
            data: Data to format

        Returns:
            JSON string
        """
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        return json.dumps(data, default=_default, ensure_ascii=False, indent=2)

    def format_success(self, message: str, data: Any = None) -> str:
        """Format a success response.

        Args:
            message: Success message
            data: Optional additional data

        Returns:
            JSON string
        """
        response: dict[str, Any] = {"success": True, "message": message}
        if data is not None:
            response["data"] = data
        return json.dumps(response, default=_default, ensure_ascii=False, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        response: dict[str, Any] = {"success": False, "code": code}
        message = getattr(error, "message", None)
        response["error"] = message or str(error)
        hint = getattr(error, "hint", None)
        if hint:
            response["hint"] = hint
        return json.dumps(response, ensure_ascii=False, indent=2)
