"""FastAPI dependency injection, the per-process safety checker."""

from __future__ import annotations

from fastapi import Request

from src.parsers.safety_check import TokenSafetyChecker


def get_checker(request: Request) -> TokenSafetyChecker:
    """Return the checker built at startup (see ``create_app``)."""
    return request.app.state.checker
