"""Providers module - client for the completion provider HTTP contract."""

from .client import CompletionClient, extract_reply, format_history

__all__ = ['CompletionClient', 'extract_reply', 'format_history']
