"""Global pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest


class RecordingTransport:
    """In-memory request function recording every descriptor it receives."""

    def __init__(self, responses: Dict[str, Any], delay: float = 0.0) -> None:
        self.responses = responses
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, descriptor: Dict[str, Any]) -> Any:
        self.calls.append(descriptor)
        if self.delay:
            await asyncio.sleep(self.delay)
        key = descriptor.get("action") or descriptor.get("path")
        response = self.responses[key]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def make_transport():
    """Factory for RecordingTransport instances."""
    return RecordingTransport
