"""Data models for Netlify API responses."""

from dataclasses import dataclass, field
from typing import Any, Optional

DEPLOY_STATE_READY = "ready"
DEPLOY_STATE_ERROR = "error"

# Order in which URL fields are consulted when reporting where a deploy lives
DEPLOY_URL_FIELDS: tuple[str, ...] = ("deploy_ssl_url", "deploy_url", "ssl_url", "url")


@dataclass
class SiteInfo:
    """A Netlify site."""

    id: str
    name: str = ""
    url: str = ""
    ssl_url: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteInfo":
        """Create SiteInfo from an API response (or a stored selection)."""
        return cls(
            id=str(data.get("id") or data.get("site_id") or ""),
            name=data.get("name") or "",
            url=data.get("url") or "",
            ssl_url=data.get("ssl_url") or "",
            raw=data,
        )

    @property
    def display_url(self) -> str:
        """Public URL, preferring HTTPS."""
        return self.ssl_url or self.url

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "ssl_url": self.ssl_url,
        }


@dataclass
class DeployInfo:
    """State of a single deploy as reported by the API."""

    id: str
    site_id: str = ""
    state: str = ""
    required: list[str] = field(default_factory=list)
    deploy_ssl_url: str = ""
    deploy_url: str = ""
    ssl_url: str = ""
    url: str = ""
    error_message: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeployInfo":
        """Create DeployInfo from an API response.

        A missing or malformed ``required`` field is treated as an empty list.
        """
        required = data.get("required")
        if not isinstance(required, list):
            required = []
        return cls(
            id=str(data.get("id") or ""),
            site_id=str(data.get("site_id") or ""),
            state=data.get("state") or "",
            required=[str(entry) for entry in required],
            deploy_ssl_url=data.get("deploy_ssl_url") or "",
            deploy_url=data.get("deploy_url") or "",
            ssl_url=data.get("ssl_url") or "",
            url=data.get("url") or "",
            error_message=data.get("error_message"),
            raw=data,
        )

    @property
    def is_ready(self) -> bool:
        return self.state == DEPLOY_STATE_READY

    @property
    def is_error(self) -> bool:
        return self.state == DEPLOY_STATE_ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "site_id": self.site_id,
            "state": self.state,
            "required": list(self.required),
            "deploy_ssl_url": self.deploy_ssl_url,
            "deploy_url": self.deploy_url,
            "ssl_url": self.ssl_url,
            "url": self.url,
            "error_message": self.error_message,
        }


def select_deploy_url(*candidates: Any) -> str:
    """Pick the URL to report for a deploy.

    Each candidate (a DeployInfo or SiteInfo, newest first) is checked for
    the fields in ``DEPLOY_URL_FIELDS`` in order; the first non-empty value
    wins. ``None`` candidates are skipped.

    Returns:
        The selected URL, or an empty string if none is available
    """
    for candidate in candidates:
        if candidate is None:
            continue
        for field_name in DEPLOY_URL_FIELDS:
            value = getattr(candidate, field_name, "")
            if value:
                return value
    return ""
