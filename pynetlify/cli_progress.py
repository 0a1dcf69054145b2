"""CLI progress display for deploy operations.

This module provides a Rich-based progress display that works with
the DeployProgressTracker from the deploy engine.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .deploy.progress import (
    DeployProgressEvent,
    DeployProgressInfo,
    DeployProgressTracker,
    DeployStage,
)


class DeployProgressDisplay:
    """Rich-based progress display for a deploy.

    Shows the current stage as the task description and, during the upload
    stage, a bar with uploaded/required file counts.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to render on (rich default if omitted)
        """
        self.console = console
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def create_tracker(self) -> DeployProgressTracker:
        """Create a DeployProgressTracker that updates this display.

        Returns:
            A configured DeployProgressTracker
        """
        return DeployProgressTracker(callback=self._handle_event)

    def _handle_event(self, info: DeployProgressInfo) -> None:
        """Handle a progress event from the tracker.

        Args:
            info: Progress information
        """
        if self._progress is None or self._task is None:
            return
        # Messages carry paths and server text, never markup
        description = escape(info.message)

        if info.event == DeployProgressEvent.STAGE_START:
            if info.stage == DeployStage.UPLOADING:
                self._progress.update(
                    self._task,
                    description=description,
                    total=info.total,
                    completed=0,
                )
            else:
                self._progress.update(self._task, description=description)

        elif info.event == DeployProgressEvent.UPLOAD_FILE_COMPLETE:
            self._progress.update(
                self._task,
                description=description,
                total=info.total,
                completed=info.uploaded,
            )

        elif info.event in (
            DeployProgressEvent.DEPLOY_COMPLETE,
            DeployProgressEvent.DEPLOY_PROCESSING,
            DeployProgressEvent.DEPLOY_FAILED,
            DeployProgressEvent.SCAN_COMPLETE,
        ):
            self._progress.update(self._task, description=description)

    def __enter__(self) -> "DeployProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            refresh_per_second=4,
            transient=True,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task("Preparing deploy...", total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
