"""
API key storage for DeepSeek Chat.

The key lives in a .env file, found with a hierarchical search:

1. Current directory: .deepseek-chat/.env -> .env
2. Parent directories (up to git root or home): .deepseek-chat/.env -> .env
3. Home directory: ~/.deepseek-chat/.env -> ~/.env

Saved keys always go to ~/.deepseek-chat/.env.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional
import logging

from dotenv import dotenv_values, load_dotenv, set_key

logger = logging.getLogger(__name__)

API_KEY_VAR = "DEEPSEEK_API_KEY"


class EnvFileLoader:
    """Finds, loads and updates the .env file holding the API key."""

    CONFIG_DIR_NAME = ".deepseek-chat"
    ENV_FILE_NAME = ".env"

    def __init__(self, working_directory: Optional[Path] = None, home_directory: Optional[Path] = None):
        """Initialize env file loader.

        Args:
            working_directory: Starting directory for search
            home_directory: Home directory override
        """
        self.working_directory = Path(working_directory or Path.cwd()).resolve()
        self.home_directory = Path(home_directory or Path.home()).resolve()
        self._loaded_vars: Dict[str, str] = {}

    @property
    def user_env_file(self) -> Path:
        """Path the API key is saved to."""
        return self.home_directory / self.CONFIG_DIR_NAME / self.ENV_FILE_NAME

    def load_env_file(self) -> Optional[Path]:
        """Load environment variables from the first .env file found.

        Variables already present in the environment are not overridden.

        Returns:
            Path to loaded .env file or None if none found
        """
        env_file_path = self._find_env_file()

        if env_file_path is None:
            logger.debug("No .env file found in search path")
            return None

        load_dotenv(env_file_path, override=False)
        self._loaded_vars = {
            key: value for key, value in dotenv_values(env_file_path).items() if value is not None
        }
        logger.info(f"Loaded environment variables from: {env_file_path}")
        return env_file_path

    def get_loaded_vars(self) -> Dict[str, str]:
        """Get variables loaded from .env file."""
        return self._loaded_vars.copy()

    def get_api_key(self) -> str:
        """Return the stored API key, or an empty string if none is configured."""
        value = os.environ.get(API_KEY_VAR)
        if value is None:
            value = self._loaded_vars.get(API_KEY_VAR)
        if value is None:
            env_file_path = self._find_env_file()
            if env_file_path is not None:
                value = dotenv_values(env_file_path).get(API_KEY_VAR)
        return value or ""

    def has_api_key(self) -> bool:
        """Check whether a non-blank API key is configured."""
        return bool(self.get_api_key().strip())

    def save_api_key(self, api_key: str) -> Path:
        """Save the API key to the user .env file.

        Args:
            api_key: The key to store

        Returns:
            Path of the updated file
        """
        env_file_path = self.user_env_file
        env_file_path.parent.mkdir(parents=True, exist_ok=True)
        env_file_path.touch(mode=0o600, exist_ok=True)

        set_key(str(env_file_path), API_KEY_VAR, api_key.strip())
        os.environ[API_KEY_VAR] = api_key.strip()
        self._loaded_vars[API_KEY_VAR] = api_key.strip()

        logger.info(f"Saved API key to: {env_file_path}")
        return env_file_path

    def get_search_paths(self) -> List[Path]:
        """Get list of all paths that would be searched for .env files.

        Returns:
            List of search paths in order
        """
        search_paths = []

        # Search upward from working directory
        current_dir = self.working_directory

        while current_dir != current_dir.parent:
            search_paths.append(current_dir / self.CONFIG_DIR_NAME / self.ENV_FILE_NAME)
            search_paths.append(current_dir / self.ENV_FILE_NAME)

            # Stop at git repository root or home directory
            if self._should_stop_search(current_dir):
                break

            current_dir = current_dir.parent

        search_paths.append(self.user_env_file)
        search_paths.append(self.home_directory / self.ENV_FILE_NAME)

        return search_paths

    def _find_env_file(self) -> Optional[Path]:
        for path in self.get_search_paths():
            if path.is_file():
                return path
        return None

    def _should_stop_search(self, directory: Path) -> bool:
        # Stop at Git repository root
        if (directory / ".git").exists():
            return True

        # Stop at home directory
        if directory == self.home_directory:
            return True

        return False

