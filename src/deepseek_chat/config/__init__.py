"""
Configuration package for DeepSeek Chat.

This package contains the settings model and the .env based API key storage.
"""

__all__ = ["settings", "env_loader"]
