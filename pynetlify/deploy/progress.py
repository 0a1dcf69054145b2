"""Progress reporting for deploy operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class DeployStage(Enum):
    """Stages of a deploy attempt, in execution order."""

    VERIFYING = "verifying"
    SCANNING = "scanning"
    CREATING = "creating"
    UPLOADING = "uploading"
    FINISHING = "finishing"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"


class DeployProgressEvent(Enum):
    """Events emitted by the deploy engine."""

    STAGE_START = "stage_start"
    SCAN_COMPLETE = "scan_complete"
    UPLOAD_FILE_COMPLETE = "upload_file_complete"
    DEPLOY_COMPLETE = "deploy_complete"
    DEPLOY_PROCESSING = "deploy_processing"
    DEPLOY_FAILED = "deploy_failed"


@dataclass
class DeployProgressInfo:
    """Snapshot passed to progress callbacks."""

    event: DeployProgressEvent
    stage: DeployStage
    message: str = ""
    uploaded: int = 0
    total: int = 0
    path: str = ""
    url: str = ""


class DeployProgressTracker:
    """Forwards deploy progress to a callback.

    The callback is purely observational: exceptions it raises propagate,
    but nothing it returns influences the deploy.
    """

    def __init__(self, callback: Optional[Callable[[DeployProgressInfo], None]] = None):
        self.callback = callback
        self.stage: Optional[DeployStage] = None
        self.uploaded = 0
        self.total = 0

    def _emit(self, info: DeployProgressInfo) -> None:
        if self.callback is not None:
            self.callback(info)

    def stage_start(self, stage: DeployStage, message: str = "") -> None:
        self.stage = stage
        self._emit(
            DeployProgressInfo(
                event=DeployProgressEvent.STAGE_START,
                stage=stage,
                message=message,
                uploaded=self.uploaded,
                total=self.total,
            )
        )

    def scan_complete(self, file_count: int, message: str = "") -> None:
        self._emit(
            DeployProgressInfo(
                event=DeployProgressEvent.SCAN_COMPLETE,
                stage=DeployStage.SCANNING,
                message=message,
                total=file_count,
            )
        )

    def upload_started(self, total: int) -> None:
        self.uploaded = 0
        self.total = total

    def file_uploaded(self, path: str, message: str = "") -> None:
        self.uploaded += 1
        self._emit(
            DeployProgressInfo(
                event=DeployProgressEvent.UPLOAD_FILE_COMPLETE,
                stage=DeployStage.UPLOADING,
                message=message,
                uploaded=self.uploaded,
                total=self.total,
                path=path,
            )
        )

    def deploy_complete(self, url: str, ready: bool, message: str = "") -> None:
        event = (
            DeployProgressEvent.DEPLOY_COMPLETE
            if ready
            else DeployProgressEvent.DEPLOY_PROCESSING
        )
        self.stage = DeployStage.READY if ready else DeployStage.POLLING
        self._emit(
            DeployProgressInfo(
                event=event,
                stage=self.stage,
                message=message,
                uploaded=self.uploaded,
                total=self.total,
                url=url,
            )
        )

    def deploy_failed(self, message: str = "") -> None:
        self.stage = DeployStage.FAILED
        self._emit(
            DeployProgressInfo(
                event=DeployProgressEvent.DEPLOY_FAILED,
                stage=DeployStage.FAILED,
                message=message,
                uploaded=self.uploaded,
                total=self.total,
            )
        )
