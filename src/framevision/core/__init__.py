"""Streaming response assembly and pagination."""

from framevision.core.assembler import AppendResult, TextAssembler
from framevision.core.paginator import ConfigurationError, Paginator
from framevision.core.session import PageView, ResponseSession

__all__ = [
    "AppendResult",
    "TextAssembler",
    "ConfigurationError",
    "Paginator",
    "PageView",
    "ResponseSession",
]
