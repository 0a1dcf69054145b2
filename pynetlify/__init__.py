"""PyNetlify - deploy local folders to Netlify with content-addressed uploads."""

from .api import NetlifyClient
from .deploy import DeployEngine, DeployResult, Manifest, ManifestBuilder
from .exceptions import (
    DeployFailedError,
    EmptyDeployError,
    MissingFileError,
    NetlifyAPIError,
    NetlifyAuthenticationError,
    NetlifyConfigError,
    NetlifyDeployError,
    NetlifyError,
    NetlifyInvalidResponseError,
    NetlifyNetworkError,
    NetlifyNotFoundError,
)
from .models import DeployInfo, SiteInfo, select_deploy_url
from .utils import calculate_file_digest, calculate_stream_digest

__all__ = [
    "NetlifyClient",
    "DeployEngine",
    "DeployResult",
    "Manifest",
    "ManifestBuilder",
    "DeployInfo",
    "SiteInfo",
    "select_deploy_url",
    "NetlifyError",
    "NetlifyAPIError",
    "NetlifyAuthenticationError",
    "NetlifyConfigError",
    "NetlifyDeployError",
    "NetlifyInvalidResponseError",
    "NetlifyNetworkError",
    "NetlifyNotFoundError",
    "DeployFailedError",
    "EmptyDeployError",
    "MissingFileError",
    "calculate_file_digest",
    "calculate_stream_digest",
]
