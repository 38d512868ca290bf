import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from pkgrepo.storage.store_manager import StoreManager
from pkgrepo.domain.exceptions import (
    DescriptorParseError,
    DescriptorReadError,
    DirectoryCreateError,
    SerializeError,
    WriteError,
)
from pkgrepo.domain.models import (
    PackageDescriptor,
    RepositoryIndex,
)

logger = logging.getLogger(__name__)


def dump_document(document) -> str:
    """Canonical pretty JSON form of a repository document."""
    # Only fields present in the source document (or set by an update) are written.
    return document.model_dump_json(indent=2, by_alias=True, exclude_unset=True) + "\n"


class JsonStoreManager(StoreManager):
    """Stores the repository index and package descriptors as pretty-printed JSON files."""

    def open_repository(self, path: Path) -> Optional[RepositoryIndex]:
        index_path = path / self.index_filename
        try:
            raw = index_path.read_bytes()
        except OSError as e:
            logger.debug(f"No repository index at {index_path}: {e}")
            return None

        try:
            return RepositoryIndex.model_validate_json(raw)
        except ValidationError as e:
            logger.debug(f"Ignoring unparseable repository index at {index_path}: {e.error_count()} error(s)")
            return None

    def load_descriptor(self, repo_root: Path, package_id: str) -> PackageDescriptor:
        path = self.descriptor_path(repo_root, package_id)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise DescriptorReadError(path) from e

        try:
            return PackageDescriptor.model_validate_json(raw)
        except ValidationError as e:
            raise DescriptorParseError(path) from e

    def save_descriptor(self, repo_root: Path, package_id: str, descriptor: PackageDescriptor) -> Path:
        path = self.descriptor_path(repo_root, package_id)

        try:
            data = dump_document(descriptor)
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise SerializeError(path) from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(path.parent) from e

        try:
            path.write_text(data, encoding="utf-8")
        except OSError as e:
            raise WriteError(path) from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path
