"""
DeepSeek Chat - a small DeepSeek chat completion client.

This package provides a blocking completion client with bounded retries and
cooperative cancellation, plus a terminal chat front end.
"""

__version__ = "0.1.0"
__author__ = "DeepSeek Chat Team"
__license__ = "Apache-2.0"

from typing import Final

# Package metadata
VERSION: Final[str] = __version__
PACKAGE_NAME: Final[str] = "deepseek-chat"
USER_AGENT: Final[str] = f"{PACKAGE_NAME}/{VERSION}"

__all__ = [
    "__version__",
    "VERSION",
    "PACKAGE_NAME",
    "USER_AGENT",
]
