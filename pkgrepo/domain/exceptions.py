from pathlib import Path
from typing import Union


class PkgRepoError(Exception):
    """Base exception for all repository tool errors."""
    pass


class RepositoryNotFoundError(PkgRepoError):
    """Raised when no ancestor of a path holds a parseable repository index."""
    def __init__(self, start_path: Union[str, Path]):
        self.start_path = Path(start_path)
        super().__init__(f"No repository found for path '{self.start_path}'")


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class RequestError(PkgRepoError):
    """Raised when a complete update request could not be built."""
    pass


class PathInvalidError(RequestError):
    """Raised when the repository path could not be obtained."""
    def __init__(self, message: str = "Provided path was invalid"):
        super().__init__(message)


class InvalidInputError(RequestError):
    """Raised when an input value is missing or could not be validated."""
    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class PayloadLoadError(RequestError):
    """Raised when a payload source file could not be read or parsed."""
    def __init__(self, path: Union[str, Path], message: str = "Could not load payload file"):
        self.path = Path(path)
        super().__init__(f"{message} `{self.path}`")


# ---------------------------------------------------------------------------
# Descriptor files
# ---------------------------------------------------------------------------


class DescriptorError(PkgRepoError):
    """Base for failures tied to a specific descriptor file."""
    message = "Descriptor operation failed for"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"{self.message} `{self.path}`")


class DescriptorReadError(DescriptorError):
    message = "Failed to read package descriptor"


class DescriptorParseError(DescriptorError):
    message = "Failed to parse package descriptor"


class DirectoryCreateError(DescriptorError):
    message = "Failed to create directory"


class SerializeError(DescriptorError):
    message = "Failed to serialize package descriptor for"


class WriteError(DescriptorError):
    message = "Failed to write package descriptor"
