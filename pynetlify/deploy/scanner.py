"""Directory scanning and manifest building for deploys."""

import fnmatch
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..utils import (
    DEFAULT_HASH_CHUNK_SIZE,
    DEFAULT_IGNORE_DIRS,
    DEFAULT_IGNORE_FILES,
    calculate_file_digest,
    is_sha1_digest,
    normalize_deploy_path,
)

logger = logging.getLogger(__name__)


@dataclass
class Manifest:
    """Content-addressed description of a local deploy folder."""

    root: Path
    """Absolute path of the scanned folder"""

    files: dict[str, str] = field(default_factory=dict)
    """Normalized path -> SHA-1 digest (sent to the API)"""

    path_index: dict[str, Path] = field(default_factory=dict)
    """Normalized path -> absolute local file"""

    hash_index: dict[str, str] = field(default_factory=dict)
    """SHA-1 digest -> normalized path.

    Only one path is kept per digest (the last one seen). Files with equal
    content are interchangeable for upload, so any of them satisfies a
    request for that digest.
    """

    def __len__(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files

    def add(self, deploy_path: str, local_path: Path, digest: str) -> None:
        """Record one file in all three indexes."""
        self.files[deploy_path] = digest
        self.path_index[deploy_path] = local_path
        self.hash_index[digest] = deploy_path

    def resolve(self, entry: str) -> Optional[tuple[str, Path]]:
        """Map an entry of a deploy's ``required`` list to a local file.

        The entry is tried as a manifest path, then as a path with a leading
        slash added, then (if it looks like a SHA-1 digest) as a digest.

        Args:
            entry: Path or digest requested by the API

        Returns:
            Tuple of (manifest path, local file), or None if unresolvable
        """
        if entry in self.path_index:
            return entry, self.path_index[entry]

        if not entry.startswith("/"):
            slashed = f"/{entry}"
            if slashed in self.path_index:
                return slashed, self.path_index[slashed]

        if is_sha1_digest(entry):
            mapped = self.hash_index.get(entry.lower())
            if mapped is not None and mapped in self.path_index:
                return mapped, self.path_index[mapped]

        return None


class ManifestBuilder:
    """Builds a Manifest by walking a local folder.

    Directories named in ``ignore_dirs`` are skipped with their whole
    subtree, files named in ``ignore_files`` are skipped, at any depth.
    Optional glob ``ignore_patterns`` are matched against the relative path
    and against the bare name.

    Examples:
        >>> builder = ManifestBuilder()
        >>> manifest = builder.build(Path("./public"))
        >>> manifest.files
        {'/index.html': 'aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d'}
    """

    def __init__(
        self,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
        ignore_files: Iterable[str] = DEFAULT_IGNORE_FILES,
        ignore_patterns: Optional[list[str]] = None,
        chunk_size: int = DEFAULT_HASH_CHUNK_SIZE,
    ):
        """Initialize manifest builder.

        Args:
            ignore_dirs: Directory names never descended into
            ignore_files: File names never included
            ignore_patterns: Glob patterns to ignore (e.g., ["*.map", "drafts/*"])
            chunk_size: Read size used while hashing
        """
        self.ignore_dirs = frozenset(ignore_dirs)
        self.ignore_files = frozenset(ignore_files)
        self.ignore_patterns = ignore_patterns or []
        self.chunk_size = chunk_size

    def _matches_pattern(self, relative_path: str, name: str) -> bool:
        for pattern in self.ignore_patterns:
            if fnmatch.fnmatchcase(relative_path, pattern) or fnmatch.fnmatchcase(
                name, pattern
            ):
                return True
        return False

    def should_ignore(self, path: Path, root: Path, is_dir: bool) -> bool:
        """Check if a directory entry is excluded from the deploy.

        Args:
            path: Entry to check
            root: Root of the scan
            is_dir: Whether the entry is a directory

        Returns:
            True if the entry (and for directories, its subtree) is skipped
        """
        name = path.name
        if is_dir and name in self.ignore_dirs:
            return True
        if not is_dir and name in self.ignore_files:
            return True
        if self.ignore_patterns:
            relative_path = path.relative_to(root).as_posix()
            if self._matches_pattern(relative_path, name):
                return True
        return False

    def build(self, root_dir: Path) -> Manifest:
        """Scan ``root_dir`` and return its manifest.

        Any error listing a directory or reading a file aborts the build.

        Args:
            root_dir: Folder to deploy

        Returns:
            Manifest (empty if no eligible files were found)

        Raises:
            FileNotFoundError: If root_dir does not exist
            NotADirectoryError: If root_dir is not a directory
            OSError: If a directory or file cannot be read
        """
        root = Path(root_dir).resolve()
        if not root.exists():
            raise FileNotFoundError(f"Deploy folder does not exist: {root_dir}")
        if not root.is_dir():
            raise NotADirectoryError(f"Deploy folder is not a directory: {root_dir}")

        manifest = Manifest(root=root)
        self._scan(root, root, manifest)
        logger.debug(f"Manifest for {root}: {len(manifest)} file(s)")
        return manifest

    def _scan(self, directory: Path, root: Path, manifest: Manifest) -> None:
        for item in directory.iterdir():
            if item.is_dir() and not item.is_symlink():
                if self.should_ignore(item, root, is_dir=True):
                    logger.debug(f"Ignoring directory: {item}")
                    continue
                self._scan(item, root, manifest)
            elif item.is_file():
                if self.should_ignore(item, root, is_dir=False):
                    logger.debug(f"Ignoring file: {item}")
                    continue
                deploy_path = normalize_deploy_path(str(item.relative_to(root)))
                digest = calculate_file_digest(item, chunk_size=self.chunk_size)
                manifest.add(deploy_path, item, digest)
            else:
                logger.debug(f"Skipping non-regular entry: {item}")
