"""Configuration constants and settings loading for WD Bridge (wdbridge)."""

import json
import os
from dataclasses import dataclass, field
from typing import Optional

# Identity provider constants
AUTH_URL = "https://wdc.auth0.com/oauth/ro"
AUTH_CLIENT_ID = "56pjpE1J4c6ZyATz3sYP8cMT47CZd6rk"
AUTH_CONNECTION = "Username-Password-Authentication"
AUTH_DEVICE = "123456789"
AUTH_SCOPE = "openid offline_access"

# Remote API constants
API_ORIGIN_TEMPLATE = "https://{host}.remotewd.com"
DIRECTORY_MIME_TYPE = "application/x.wd.dir"
BATCH_BOUNDARY = "3cb3d25a-a9b9-4906-a267-9b65ae299d0f"
ROOT_FOLDER_ID = "root"

# Transfer constants
UPLOAD_BLOCK_SIZE = 20 * 1024  # 20 KiB
DOWNLOAD_CHUNK_SIZE = 64 * 1024  # 64 KiB
MAX_ATTEMPTS = 10

# Environment variable names
ENV_USERNAME = "WDC_USERNAME"
ENV_PASSWORD = "WDC_PASSWORD"
ENV_HOST = "WDC_HOST"
ENV_SETTINGS = "WDC_SETTINGS"

DEFAULT_SETTINGS_FILE = "settings.json"


@dataclass
class Settings:
    """Credentials and device host used to reach the cloud device."""

    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    host: Optional[str] = None

    def is_complete(self) -> bool:
        return all([self.username, self.password, self.host])


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from a JSON file, then apply environment overrides.

    The file uses the keys ``user``, ``pass`` and ``wdHost``. A missing file
    is not an error; a malformed one raises ``ValueError``.
    """
    settings = Settings()
    settings_path = path or os.getenv(ENV_SETTINGS) or DEFAULT_SETTINGS_FILE

    if os.path.isfile(settings_path):
        with open(settings_path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid settings file {settings_path}: {e}") from e

        settings.username = data.get("user")
        settings.password = data.get("pass")
        settings.host = data.get("wdHost")

    settings.username = os.getenv(ENV_USERNAME) or settings.username
    settings.password = os.getenv(ENV_PASSWORD) or settings.password
    settings.host = os.getenv(ENV_HOST) or settings.host

    return settings
