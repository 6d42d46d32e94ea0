"""
Command-line interface for DeepSeek Chat.
"""

__all__ = ["app", "session"]
