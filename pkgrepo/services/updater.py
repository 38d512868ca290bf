"""
Insert or update release targets in a package descriptor.

An update resolves one release by its (version, channel) pair and one target
by its platform inside that release. Entries that already exist are reused in
place; new entries are inserted at the front of their list so the newest
release and target are always read first.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pkgrepo.domain.models import (
    PackageDescriptor,
    Release,
    Request,
    Target,
    version_key,
)
from pkgrepo.services.locator import find_repository
from pkgrepo.storage.store_manager import StoreManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateOutcome:
    """Where the request landed in the descriptor and whether new entries were created."""

    release_index: int
    target_index: int
    release_created: bool
    target_created: bool


def find_release_index(releases: List[Release], version: str, channel: Optional[str]) -> Optional[int]:
    # Channels are compared exactly: None does not match "stable".
    key = version_key(version)
    for i, release in enumerate(releases):
        if version_key(release.version) == key and release.channel == channel:
            return i
    return None


def find_target_index(targets: List[Target], platform: str) -> Optional[int]:
    for i, target in enumerate(targets):
        if target.platform == platform:
            return i
    return None


class PackageUpdater:
    """Applies update requests to package descriptors held by a StoreManager."""

    def __init__(self, store: StoreManager):
        self.store = store

    def apply(self, descriptor: PackageDescriptor, request: Request) -> UpdateOutcome:
        """
        Upsert the request's release and target into `descriptor` in memory.

        The descriptor is mutated in place. Applying the same request twice
        leaves the descriptor as it was after the first application.
        """
        releases = descriptor.releases
        release_index = find_release_index(releases, request.version, request.channel)
        release_created = release_index is None
        if release_created:
            release = Release(version=request.version, targets=[])
            if request.channel is not None:
                release.channel = request.channel
            releases.insert(0, release)
            release_index = 0

        targets = releases[release_index].targets
        payload = request.payload.model_copy(deep=True)
        target_index = find_target_index(targets, request.platform)
        target_created = target_index is None
        if target_created:
            targets.insert(0, Target(platform=request.platform, payload=payload))
            target_index = 0
        else:
            targets[target_index].payload = payload

        return UpdateOutcome(
            release_index=release_index,
            target_index=target_index,
            release_created=release_created,
            target_created=target_created,
        )

    def update(self, repo_root: Path, request: Request) -> UpdateOutcome:
        """
        Read the package descriptor under `repo_root`, apply `request` and write it back.

        Errors from reading, parsing, serializing and writing propagate as
        DescriptorError subclasses annotated with the file path. Nothing is
        written unless the whole document serialized successfully.
        """
        descriptor = self.store.load_descriptor(repo_root, request.id)
        outcome = self.apply(descriptor, request)
        path = self.store.save_descriptor(repo_root, request.id, descriptor)

        channel = request.channel or "stable"
        logger.info(
            f"{'Created' if outcome.release_created else 'Updated'} release {request.version} ({channel}), "
            f"{'created' if outcome.target_created else 'updated'} target '{request.platform}' in {path}"
        )
        return outcome

    def run(self, request: Request) -> UpdateOutcome:
        """Locate the repository from the request's path and update the package descriptor."""
        logger.debug(f"Running update: {request!r}")
        repo_root = find_repository(request.repo_path, self.store)
        return self.update(repo_root, request)
