"""Pydantic models for the chat API and normalized provider data."""

from .requests import ChatRequest, Intent, Location
from .responses import ChatResponse

__all__ = ["ChatRequest", "Intent", "Location", "ChatResponse"]
