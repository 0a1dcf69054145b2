"""Exception hierarchy for pynetlify.

Exceptions carry structured fields (status codes, offending entries, deploy
ids) so that callers can render them through the message catalog instead of
relying on the default English text.
"""

from pathlib import Path
from typing import Optional


class NetlifyError(Exception):
    """Base exception for all pynetlify errors."""


class NetlifyAPIError(NetlifyError):
    """Remote API returned a non-success response."""

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        status_text: str = "",
        detail: str = "",
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.detail = detail
        if not message:
            message = _format_api_message(status_code, status_text, detail)
        super().__init__(message)


class NetlifyAuthenticationError(NetlifyAPIError):
    """The access token was rejected (HTTP 401)."""


class NetlifyNotFoundError(NetlifyAPIError):
    """The requested resource does not exist (HTTP 404)."""


class NetlifyNetworkError(NetlifyAPIError):
    """The request never produced an HTTP response."""


class NetlifyInvalidResponseError(NetlifyAPIError):
    """A successful response carried a body that is not valid JSON."""


class NetlifyConfigError(NetlifyError):
    """Required configuration (token, site, folder) is missing."""


class NetlifyDeployError(NetlifyError):
    """Base class for failures of a deploy attempt."""


class EmptyDeployError(NetlifyDeployError):
    """The deploy root contains no eligible files."""

    def __init__(self, root: Path):
        self.root = root
        super().__init__(f"No files to deploy in {root}")


class MissingFileError(NetlifyDeployError):
    """A required entry could not be mapped to a local file."""

    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(f"Required file not found locally: {entry}")


class DeployFailedError(NetlifyDeployError):
    """The remote reported the deploy in the ``error`` state."""

    def __init__(self, deploy_id: str, error_message: Optional[str] = None):
        self.deploy_id = deploy_id
        self.error_message = error_message
        message = f"Deploy {deploy_id} failed during processing"
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message)


def _format_api_message(
    status_code: Optional[int], status_text: str, detail: str
) -> str:
    if status_code is None:
        return detail or "API request failed"
    message = f"API request failed with status {status_code}"
    if status_text:
        message = f"{message} {status_text}"
    if detail:
        message = f"{message}: {detail}"
    return message
