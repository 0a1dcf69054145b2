"""User-facing message catalog.

Messages are looked up by key and formatted with named parameters, so the
deploy engine and the CLI never embed rendered text in error or data types.
A catalog falls back to English and then to the key itself.
"""

import re
from typing import Any, Callable, Optional

from .exceptions import (
    DeployFailedError,
    EmptyDeployError,
    MissingFileError,
    NetlifyAPIError,
    NetlifyAuthenticationError,
    NetlifyConfigError,
    NetlifyNetworkError,
)

Translator = Callable[..., str]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

ENGLISH_MESSAGES: dict[str, str] = {
    "progress.verifySite": "Verifying site {site}...",
    "progress.scanFiles": "Scanning files in {folder}...",
    "progress.scanComplete": "Found {count} file(s)",
    "progress.createDeploy": "Creating deploy...",
    "progress.uploadFile": "Uploading files ({uploaded}/{total})",
    "progress.finish": "Finalizing deploy...",
    "progress.wait": "Waiting for deploy to be processed...",
    "info.deploy.done": "Deploy complete: {url}",
    "warn.deploy.processing": (
        "Deploy is still processing; it should be available shortly at {url}"
    ),
    "error.deploy.failed": "Deploy failed",
    "error.deploy.processing": "Deploy failed while processing on Netlify",
    "error.emptyDir": "The selected folder has no files to deploy: {folder}",
    "error.missingFile": "Required file not found locally: {file}",
    "error.pat.invalid": (
        "Access token is invalid or expired. Run 'pynetlify init' to set a new one"
    ),
    "error.pat.missing": "Access token not configured.",
    "error.api": "Netlify API error {status} {statusText}: {detail}",
    "error.network": "Network error: {detail}",
    "error.getSites": "Could not retrieve sites",
    "error.site.name.taken": "That site name is already taken, try another one",
    "warn.needPat": "Run 'pynetlify init' to configure your access token",
    "warn.noFolder": "No deploy folder selected. Use 'pynetlify folder PATH'",
    "warn.noSite": "No site selected. Use 'pynetlify site' or 'pynetlify create-site'",
    "warn.noSites": "No sites found for this account",
    "warn.noSiteUrl": "The selected site has no URL yet",
    "info.pat.saved": "Access token saved",
    "info.pat.cleared": "Access token cleared",
    "info.folder.selected": "Deploy folder set to: {path}",
    "info.site.selected": "Selected site: {name}",
    "info.site.created": "Created site: {name}",
    "info.site.created.adjusted": "Site created with adjusted name: {name}",
    "info.site.opened": "Opened {url}",
    "input.site.validate": "Site name may only contain letters and digits",
}


def format_message(text: str, params: Optional[dict[str, Any]] = None) -> str:
    """Substitute ``{name}`` placeholders; unknown placeholders are kept.

    Examples:
        >>> format_message("Uploaded {n} of {total}", {"n": 1})
        'Uploaded 1 of {total}'
    """
    if not params:
        return text

    def replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in params:
            return str(params[key])
        return match.group(0)

    return _PLACEHOLDER.sub(replace, text)


class MessageCatalog:
    """Key-based message lookup with English fallback."""

    def __init__(
        self,
        messages: Optional[dict[str, str]] = None,
        fallback: Optional[dict[str, str]] = None,
    ):
        self.fallback = ENGLISH_MESSAGES if fallback is None else fallback
        self.messages = messages if messages is not None else self.fallback

    def translate(self, key: str, **params: Any) -> str:
        """Render the message for ``key`` with the given parameters."""
        text = self.messages.get(key) or self.fallback.get(key) or key
        return format_message(text, params)

    __call__ = translate


default_catalog = MessageCatalog()


def describe_error(error: BaseException, translate: Optional[Translator] = None) -> str:
    """Render an exception as a user-facing message."""
    t = translate or default_catalog.translate

    if isinstance(error, NetlifyAuthenticationError):
        return t("error.pat.invalid")
    if isinstance(error, NetlifyNetworkError):
        return t("error.network", detail=error.detail or str(error))
    if isinstance(error, NetlifyAPIError):
        if error.status_code is None:
            return str(error)
        return t(
            "error.api",
            status=error.status_code,
            statusText=error.status_text,
            detail=error.detail,
        )
    if isinstance(error, EmptyDeployError):
        return t("error.emptyDir", folder=error.root)
    if isinstance(error, MissingFileError):
        return t("error.missingFile", file=error.entry)
    if isinstance(error, DeployFailedError):
        return t("error.deploy.processing")
    if isinstance(error, NetlifyConfigError):
        return str(error) or t("error.pat.missing")
    return str(error) or t("error.deploy.failed")
