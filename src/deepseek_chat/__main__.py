"""
Entry point for running DeepSeek Chat as a module.

This allows users to run the CLI using:
    python -m deepseek_chat [command] [options]
"""

from deepseek_chat.cli.app import main

if __name__ == "__main__":
    main()
