"""Standardized response utilities for plugin results and MCP tools."""

from typing import Any, Dict, List, Optional


def success_response(
    data: Any,
    warnings: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Create a successful response envelope.

    Args:
        data: The response data
        warnings: Optional list of warning messages

    Returns:
        Standardized success response
    """
    response = {
        "ok": True,
        "data": data
    }

    if warnings:
        response["warnings"] = warnings

    return response


def error_response(message: str, code: Optional[str] = None) -> Dict[str, Any]:
    """Create an error response envelope.

    Args:
        message: Error message
        code: Optional error code

    Returns:
        Standardized error response
    """
    error = {"message": message}

    if code:
        error["code"] = code

    return {
        "ok": False,
        "error": error
    }
