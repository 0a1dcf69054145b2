"""Configuration management for pynetlify."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.netlify.com/api/v1"

TOKEN_ENV_VAR = "NETLIFY_AUTH_TOKEN"
API_URL_ENV_VAR = "NETLIFY_API_URL"
CONFIG_DIR_ENV_VAR = "PYNETLIFY_CONFIG_DIR"

CONFIG_FILE_NAME = "config.json"


class Config:
    """Persistent settings: access token, deploy folder and current site.

    Values are stored as JSON in ``~/.config/pynetlify/config.json``. The
    ``NETLIFY_AUTH_TOKEN`` environment variable takes precedence over the
    stored token.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                       $PYNETLIFY_CONFIG_DIR or ~/.config/pynetlify
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
            if env_dir:
                config_dir = Path(env_dir)
            else:
                config_dir = Path.home() / ".config" / "pynetlify"
        self.config_dir = config_dir

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_dir / CONFIG_FILE_NAME

    def _load(self) -> dict[str, Any]:
        config_path = self.get_config_path()
        if not config_path.exists():
            return {}
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed config file {config_path}")
            return {}
        return data

    def _save(self, data: dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.get_config_path()
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        # The file holds an access token
        config_path.chmod(0o600)
        logger.debug(f"Saved configuration to {config_path}")

    def _update(self, key: str, value: Any) -> None:
        data = self._load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._save(data)

    # =========================
    # Access token
    # =========================

    @property
    def api_key(self) -> Optional[str]:
        """Access token from the environment or the config file."""
        return os.environ.get(TOKEN_ENV_VAR) or self._load().get("api_key")

    @property
    def api_url(self) -> str:
        """Base URL of the Netlify API."""
        return os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL

    def is_configured(self) -> bool:
        """Check whether an access token is available."""
        return bool(self.api_key)

    def save_api_key(self, api_key: str) -> None:
        """Store the access token."""
        self._update("api_key", api_key.strip())

    def clear_api_key(self) -> None:
        """Remove the stored access token."""
        self._update("api_key", None)

    # =========================
    # Deploy folder and site
    # =========================

    def get_current_folder(self) -> Optional[Path]:
        """Return the selected deploy folder, if any."""
        folder = self._load().get("folder")
        return Path(folder) if folder else None

    def save_current_folder(self, folder: Optional[Path]) -> None:
        """Store the selected deploy folder (None clears it)."""
        self._update("folder", str(folder) if folder is not None else None)

    def get_current_site(self) -> Optional[dict[str, Any]]:
        """Return the selected site as ``{"id", "name", "url"}``, if any."""
        site = self._load().get("site")
        if isinstance(site, dict) and site.get("id"):
            return site
        return None

    def save_current_site(self, site_id: str, name: str = "", url: str = "") -> None:
        """Store the selected site."""
        self._update("site", {"id": site_id, "name": name, "url": url})

    def clear_current_site(self) -> None:
        """Forget the selected site."""
        self._update("site", None)


config = Config()
