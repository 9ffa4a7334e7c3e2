import logging
import os

__version__ = "0.3.0"

logger = logging.getLogger(__name__)


def load_env_file():
    """Load environment variables from ENV_FILE (default `.env`) when one exists."""
    try:
        from dotenv import load_dotenv, find_dotenv

        env_file = os.environ.get("ENV_FILE", ".env")
        path = find_dotenv(filename=env_file, raise_error_if_not_found=True)
        logger.info(f"Loading environment variables from {path}")
        load_dotenv(dotenv_path=path)

    except Exception:
        # No file to set environment variables
        pass


load_env_file()
