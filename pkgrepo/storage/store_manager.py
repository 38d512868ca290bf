from abc import ABC, abstractmethod
from typing import Optional
from pathlib import Path
from pkgrepo.domain.models import (
    PackageDescriptor,
    RepositoryIndex,
)

INDEX_FILENAME = "index.json"
PACKAGES_DIRNAME = "packages"


class StoreManager(ABC):
    """
    Abstract base class for repository document storage.
    """

    index_filename: str = INDEX_FILENAME

    def descriptor_path(self, repo_root: Path, package_id: str) -> Path:
        """Path of the descriptor document for a package."""
        return repo_root / PACKAGES_DIRNAME / package_id / self.index_filename

    @abstractmethod
    def open_repository(self, path: Path) -> Optional[RepositoryIndex]:
        """
        Load the repository index stored directly in directory `path`.

        Returns None when there is no readable, parseable index there.
        Never raises for missing or broken documents.
        """
        pass

    @abstractmethod
    def load_descriptor(self, repo_root: Path, package_id: str) -> PackageDescriptor:
        """
        Read and parse a package descriptor.

        Raises DescriptorReadError or DescriptorParseError.
        """
        pass

    @abstractmethod
    def save_descriptor(self, repo_root: Path, package_id: str, descriptor: PackageDescriptor) -> Path:
        """
        Serialize and write a package descriptor, returning the written path.

        The document is serialized in full before the file is touched.
        Raises SerializeError, DirectoryCreateError or WriteError.
        """
        pass
