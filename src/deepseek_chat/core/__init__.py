"""
Core components for DeepSeek Chat.

This module holds the completion client and its supporting pieces.
"""

__all__ = ["client"]
