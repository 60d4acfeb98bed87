"""Configuration management for the flattener CLI."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Config:
    """Configuration loaded from .env file."""

    def __init__(self, env_file: Optional[str] = None):
        """Load configuration from .env file."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Load from project root .env
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        # Loading external documents
        self.http_timeout = float(os.getenv("FLATTEN_HTTP_TIMEOUT", "30"))

        # Output
        self.output_format = os.getenv("FLATTEN_OUTPUT_FORMAT", "yaml").lower()
        self.strict = os.getenv("FLATTEN_STRICT", "false").lower() == "true"
        self.log_processing_progress = os.getenv("LOG_PROCESSING_PROGRESS", "true").lower() == "true"
