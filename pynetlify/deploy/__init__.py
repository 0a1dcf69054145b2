"""Deploy engine for pynetlify - manifest diffing, uploads and polling."""

from .engine import DeployEngine, DeployResult
from .progress import (
    DeployProgressEvent,
    DeployProgressInfo,
    DeployProgressTracker,
    DeployStage,
)
from .scanner import Manifest, ManifestBuilder

__all__ = [
    "DeployEngine",
    "DeployResult",
    "DeployProgressEvent",
    "DeployProgressInfo",
    "DeployProgressTracker",
    "DeployStage",
    "Manifest",
    "ManifestBuilder",
]
