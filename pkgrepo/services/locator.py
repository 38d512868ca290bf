"""
Find the repository that encloses a filesystem path.

A directory is a repository root when it contains an index document that
deserializes as a RepositoryIndex. The search starts at the given path and
walks upward one ancestor at a time until the filesystem root.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Union

from pkgrepo.domain.exceptions import RepositoryNotFoundError
from pkgrepo.storage.store_manager import StoreManager

logger = logging.getLogger(__name__)


def iter_ancestors(path: Path) -> Iterator[Path]:
    """Yield `path` and then each of its ancestors, nearest first, ending at the filesystem root."""
    yield path
    yield from path.parents


def find_repository(start_path: Union[str, Path], store: StoreManager) -> Path:
    """
    Return the root directory of the repository enclosing `start_path`.

    `start_path` may be the repository index file itself or any path at or
    below the repository root. Missing, unreadable and unparseable index
    documents are all skipped, so a broken index never stops the search for a
    valid one further up.

    Raises:
        RepositoryNotFoundError: if no ancestor holds a valid repository index.
    """
    # abspath also collapses ".." components.
    path = Path(os.path.abspath(os.path.expanduser(start_path)))

    if path.name == store.index_filename:
        path = path.parent

    for candidate in iter_ancestors(path):
        if store.open_repository(candidate) is not None:
            logger.info(f"Found repository at {candidate}")
            return candidate

    raise RepositoryNotFoundError(start_path)
