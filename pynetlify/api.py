"""API client for Netlify."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .config import config
from .exceptions import (
    NetlifyAPIError,
    NetlifyAuthenticationError,
    NetlifyConfigError,
    NetlifyInvalidResponseError,
    NetlifyNetworkError,
    NetlifyNotFoundError,
)
from .models import DeployInfo, SiteInfo
from .utils import encode_deploy_path

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"


def extract_error_detail(body: str) -> str:
    """Extract a human-readable detail from an error response body.

    Lookup order: a top-level JSON list is joined with commas; otherwise a
    ``message`` field; otherwise an ``errors`` field, flattened (a list is
    joined with commas, a mapping is rendered as ``key: v1, v2`` pairs
    joined with semicolons). Anything else falls back to the raw body.

    Args:
        body: Raw response text

    Returns:
        Detail string (may be empty if the body is empty)

    Examples:
        >>> extract_error_detail('{"message": "Not allowed"}')
        'Not allowed'
        >>> extract_error_detail('{"errors": {"name": ["taken", "too short"]}}')
        'name: taken, too short'
        >>> extract_error_detail("Bad Gateway")
        'Bad Gateway'
    """
    try:
        parsed = json.loads(body)
    except ValueError:
        return body

    if isinstance(parsed, list):
        return ", ".join(str(item) for item in parsed)
    if not isinstance(parsed, dict):
        return body

    if parsed.get("message"):
        return str(parsed["message"])

    errors = parsed.get("errors")
    if isinstance(errors, list):
        return ", ".join(str(item) for item in errors)
    if isinstance(errors, dict):
        parts = []
        for key, value in errors.items():
            if isinstance(value, list):
                value = ", ".join(str(item) for item in value)
            parts.append(f"{key}: {value}")
        return "; ".join(parts)

    return body


class NetlifyClient:
    """Client for interacting with the Netlify API."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Netlify API client.

        Args:
            api_key: Optional access token (uses config if not provided)
            api_url: Optional API URL (uses config if not provided)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or config.api_key
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.timeout = timeout
        self._transport = transport

        if not self.api_key:
            raise NetlifyConfigError(
                "Access token not configured. "
                "Please set NETLIFY_AUTH_TOKEN environment variable."
            )

        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": JSON_CONTENT_TYPE,
                },
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> NetlifyClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _raise_for_response(self, response: httpx.Response) -> None:
        """Convert a non-success response into the matching exception.

        Raises:
            NetlifyAuthenticationError: On 401, whatever the body says
            NetlifyNotFoundError: On 404
            NetlifyAPIError: On any other non-success status
        """
        status_code = response.status_code
        status_text = response.reason_phrase

        if status_code == 401:
            raise NetlifyAuthenticationError(
                "Invalid access token or unauthorized access",
                status_code=status_code,
                status_text=status_text,
            )

        detail = extract_error_detail(response.text)
        if status_code == 404:
            raise NetlifyNotFoundError(
                status_code=status_code, status_text=status_text, detail=detail
            )
        raise NetlifyAPIError(
            status_code=status_code, status_text=status_text, detail=detail
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        raw_response: bool = False,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an API request.

        Failures are never retried; the caller decides what to do next.

        Args:
            method: HTTP method
            endpoint: API endpoint path (e.g. "/sites")
            raw_response: If True, do not parse the body of a successful
                response and return an empty dict
            headers: Headers overriding the client defaults
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data

        Raises:
            NetlifyAPIError: If the request fails
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        client = self._get_client()

        try:
            logger.debug(f"{method} {url}")
            response = client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise NetlifyNetworkError(f"Network error: {e}", detail=str(e)) from e

        if not response.is_success:
            self._raise_for_response(response)

        if raw_response:
            return {}

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise NetlifyInvalidResponseError(
                "Invalid JSON response from server",
                status_code=response.status_code,
                status_text=response.reason_phrase,
            ) from e

    # =========================
    # Site Operations
    # =========================

    def get_site(self, site_id: str) -> SiteInfo:
        """Fetch a site, confirming that it exists.

        Args:
            site_id: ID of the site

        Returns:
            The site

        Raises:
            NetlifyNotFoundError: If the site does not exist
        """
        result: dict[str, Any] = self._request("GET", f"/sites/{site_id}")
        return SiteInfo.from_dict(result)

    def list_sites(self, per_page: int = 50) -> list[SiteInfo]:
        """List sites of the authenticated account.

        Args:
            per_page: Maximum number of sites returned

        Returns:
            List of sites (first page only)
        """
        result = self._request("GET", "/sites", params={"per_page": per_page})
        if not isinstance(result, list):
            return []
        return [SiteInfo.from_dict(site) for site in result if isinstance(site, dict)]

    def create_site(self, name: str | None = None) -> SiteInfo:
        """Create a new site.

        Args:
            name: Optional site name (Netlify picks one if omitted)

        Returns:
            The created site. Its name may differ from the requested one.
        """
        payload: dict[str, Any] = {}
        if name and name.strip():
            payload["name"] = name.strip()
        result: dict[str, Any] = self._request("POST", "/sites", json=payload)
        return SiteInfo.from_dict(result)

    # =========================
    # Deploy Operations
    # =========================

    def create_deploy(self, site_id: str, files: dict[str, str]) -> DeployInfo:
        """Create a deploy from a file manifest.

        Args:
            site_id: ID of the target site
            files: Manifest mapping normalized paths to SHA-1 digests

        Returns:
            The new deploy, whose ``required`` list names the paths or
            digests that must be uploaded
        """
        result: dict[str, Any] = self._request(
            "POST", f"/sites/{site_id}/deploys", json={"files": files}
        )
        return DeployInfo.from_dict(result)

    def upload_deploy_file(self, deploy_id: str, path: str, content: bytes) -> None:
        """Upload the content of one file of a deploy.

        Args:
            deploy_id: ID of the deploy
            path: Normalized manifest path of the file
            content: File bytes
        """
        self._request(
            "PUT",
            f"/deploys/{deploy_id}/files/{encode_deploy_path(path)}",
            raw_response=True,
            headers={"Content-Type": BINARY_CONTENT_TYPE},
            content=content,
        )

    def finish_deploy(self, deploy_id: str) -> None:
        """Signal that all files of a deploy have been uploaded.

        Raises:
            NetlifyNotFoundError: If the deploy is unknown or already finished
        """
        self._request("POST", f"/deploys/{deploy_id}/finish", raw_response=True)

    def get_deploy(self, deploy_id: str) -> DeployInfo:
        """Fetch the current state of a deploy."""
        result: dict[str, Any] = self._request("GET", f"/deploys/{deploy_id}")
        return DeployInfo.from_dict(result)
