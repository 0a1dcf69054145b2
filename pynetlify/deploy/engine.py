"""Core deploy engine: manifest diffing, uploads and completion polling."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..api import NetlifyClient
from ..exceptions import (
    DeployFailedError,
    EmptyDeployError,
    MissingFileError,
    NetlifyNotFoundError,
)
from ..messages import Translator, default_catalog, describe_error
from ..models import DeployInfo, SiteInfo, select_deploy_url
from ..utils import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL
from .progress import DeployProgressTracker, DeployStage
from .scanner import Manifest, ManifestBuilder

logger = logging.getLogger(__name__)


@dataclass
class DeployResult:
    """Outcome of a deploy attempt that did not fail."""

    deploy: DeployInfo
    """Most recent deploy state seen"""

    site: SiteInfo
    """Target site as returned by the API"""

    url: str
    """Best-known public URL of the deploy"""

    ready: bool
    """False when polling gave up before the deploy reached ``ready``"""

    uploaded: int = 0
    """Number of files uploaded"""

    required: int = 0
    """Number of entries the API asked for"""

    file_count: int = 0
    """Number of files in the manifest"""

    def to_dict(self) -> dict:
        return {
            "deploy_id": self.deploy.id,
            "site_id": self.site.id,
            "state": self.deploy.state,
            "ready": self.ready,
            "url": self.url,
            "files": self.file_count,
            "required": self.required,
            "uploaded": self.uploaded,
        }


class DeployEngine:
    """Drives a single deploy from local folder to processed remote deploy.

    Stages run strictly in order: verify the site, scan the folder, create
    the deploy, upload the required files one at a time, finish the deploy
    and poll until it is ready. Every error is fatal to the attempt except
    a 404 from the finish call, which means the deploy already moved on.
    """

    def __init__(
        self,
        client: NetlifyClient,
        builder: Optional[ManifestBuilder] = None,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        progress: Optional[DeployProgressTracker] = None,
        translate: Optional[Translator] = None,
    ):
        """Initialize deploy engine.

        Args:
            client: Netlify API client
            builder: Manifest builder (default ignore rules if omitted)
            max_poll_attempts: Maximum number of status polls
            poll_interval: Seconds to wait between status polls
            progress: Optional tracker receiving progress events
            translate: Message formatter (key, **params) -> str
        """
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self.client = client
        self.builder = builder or ManifestBuilder()
        self.max_poll_attempts = max_poll_attempts
        self.poll_interval = poll_interval
        self.progress = progress or DeployProgressTracker()
        self.translate = translate or default_catalog.translate

    def deploy(self, root_dir: Path, site: SiteInfo) -> DeployResult:
        """Deploy a local folder to a site.

        Args:
            root_dir: Folder to deploy
            site: Target site

        Returns:
            DeployResult; ``ready`` is False if the deploy was still being
            processed when polling gave up

        Raises:
            NetlifyAPIError: If an API call fails
            EmptyDeployError: If the folder has no eligible files
            MissingFileError: If a required entry has no local file
            DeployFailedError: If the deploy ends in the error state
            OSError: If the local folder cannot be read
        """
        try:
            return self._run(Path(root_dir), site)
        except Exception as e:
            self.progress.deploy_failed(describe_error(e, self.translate))
            raise

    def _run(self, root_dir: Path, site: SiteInfo) -> DeployResult:
        t = self.translate

        self.progress.stage_start(
            DeployStage.VERIFYING, t("progress.verifySite", site=site.display_name)
        )
        logger.info(f"Verifying site {site.id}")
        site = self.client.get_site(site.id)

        self.progress.stage_start(
            DeployStage.SCANNING, t("progress.scanFiles", folder=root_dir)
        )
        manifest = self.builder.build(root_dir)
        if manifest.is_empty:
            raise EmptyDeployError(root_dir)
        self.progress.scan_complete(
            len(manifest), t("progress.scanComplete", count=len(manifest))
        )
        logger.info(f"Scanned {len(manifest)} file(s) in {manifest.root}")

        self.progress.stage_start(DeployStage.CREATING, t("progress.createDeploy"))
        created = self.client.create_deploy(site.id, manifest.files)
        logger.info(
            f"Created deploy {created.id}; "
            f"{len(created.required)} of {len(manifest)} file(s) required"
        )

        uploaded = self._upload_required(created, manifest)

        self.progress.stage_start(DeployStage.FINISHING, t("progress.finish"))
        self._finish(created.id)

        self.progress.stage_start(DeployStage.POLLING, t("progress.wait"))
        latest = self._wait_for_deploy(created.id)

        url = select_deploy_url(latest, created, site)
        ready = latest.is_ready
        if ready:
            message = t("info.deploy.done", url=url)
        else:
            logger.info(
                f"Deploy {created.id} still in state '{latest.state}' after "
                f"{self.max_poll_attempts} poll(s)"
            )
            message = t("warn.deploy.processing", url=url)
        self.progress.deploy_complete(url, ready, message)

        return DeployResult(
            deploy=latest,
            site=site,
            url=url,
            ready=ready,
            uploaded=uploaded,
            required=len(created.required),
            file_count=len(manifest),
        )

    def _upload_required(self, deploy: DeployInfo, manifest: Manifest) -> int:
        """Upload every entry of the deploy's required list, in order.

        Returns:
            Number of files uploaded
        """
        total = len(deploy.required)
        self.progress.upload_started(total)
        self.progress.stage_start(
            DeployStage.UPLOADING,
            self.translate("progress.uploadFile", uploaded=0, total=total),
        )

        uploaded = 0
        for entry in deploy.required:
            resolved = manifest.resolve(entry)
            if resolved is None:
                raise MissingFileError(entry)
            deploy_path, local_path = resolved

            content = local_path.read_bytes()
            logger.debug(f"Uploading {deploy_path} ({len(content)} bytes)")
            self.client.upload_deploy_file(deploy.id, deploy_path, content)

            uploaded += 1
            self.progress.file_uploaded(
                deploy_path,
                self.translate("progress.uploadFile", uploaded=uploaded, total=total),
            )
        return uploaded

    def _finish(self, deploy_id: str) -> None:
        try:
            self.client.finish_deploy(deploy_id)
        except NetlifyNotFoundError:
            # The deploy can already be past the upload phase
            logger.warning(f"Finish returned 404 for deploy {deploy_id}; continuing")

    def _wait_for_deploy(self, deploy_id: str) -> DeployInfo:
        """Poll until the deploy is ready, failed, or attempts run out.

        Returns:
            The ready deploy, or the last state seen if attempts ran out

        Raises:
            DeployFailedError: If the deploy reaches the error state
        """
        attempt = 1
        while True:
            deploy = self.client.get_deploy(deploy_id)
            logger.debug(
                f"Deploy {deploy_id} state: {deploy.state or 'unknown'} "
                f"(poll {attempt}/{self.max_poll_attempts})"
            )
            if deploy.is_ready:
                return deploy
            if deploy.is_error:
                raise DeployFailedError(deploy_id, deploy.error_message)
            if attempt >= self.max_poll_attempts:
                return deploy
            attempt += 1
            time.sleep(self.poll_interval)
