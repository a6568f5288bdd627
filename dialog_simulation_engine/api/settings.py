"""Runtime configuration for the API.

Uses Pydantic BaseSettings to read environment variables with the
`DIALOG_API_` prefix.

Example:
    export DIALOG_API_CORS_ALLOW_ALL=false
    export DIALOG_API_DIALOGS_DIR=/srv/training/dialogs
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from environment variables.

    Attributes:
        cors_allow_all (bool): Whether to allow all CORS origins. Useful in dev.
        dialogs_dir (Optional[Path]): Where dialog content is read from;
            None means the built-in `dialogs/` directory.
    """

    model_config = SettingsConfigDict(env_prefix="DIALOG_API_")

    cors_allow_all: bool = True
    dialogs_dir: Optional[Path] = None


settings = Settings()
