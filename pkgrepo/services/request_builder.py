"""
Build complete update requests from partial input.

Every field missing from a PartialRequest is obtained from a ValueSource:
the interactive source prompts on the terminal, the non-interactive source
only accepts defaults. The resulting Request is fully validated, so the
updater never checks its fields again.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, TypeVar

import yaml
from pydantic import ValidationError

from pkgrepo.core.dependencies import get_default_repo_path
from pkgrepo.domain.exceptions import (
    InvalidInputError,
    PathInvalidError,
    PayloadLoadError,
)
from pkgrepo.domain.models import (
    PartialRequest,
    Payload,
    PayloadAdapter,
    Request,
    parse_version,
)
from pkgrepo.services.locator import find_repository
from pkgrepo.storage.store_manager import StoreManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ValueSource(ABC):
    """Supplies values for fields that were not given explicitly."""

    # Ask again after an empty or unparseable answer instead of failing.
    reprompt: bool = False

    @abstractmethod
    def ask(self, label: str, default: Optional[str] = None) -> str:
        """
        Return a raw value for `label`.

        When the source has nothing to offer it raises InvalidInputError.
        """
        pass


class InteractiveValueSource(ValueSource):
    """Prompts for each value on standard input."""

    reprompt = True

    def ask(self, label: str, default: Optional[str] = None) -> str:
        prompt = f"{label} [{default}]: " if default else f"{label}: "
        try:
            answer = input(prompt).strip()
        except (EOFError, KeyboardInterrupt) as e:
            raise InvalidInputError(f"No value given for '{label}'") from e
        if not answer and default is not None:
            return default
        return answer


class NonInteractiveValueSource(ValueSource):
    """Accepts defaults and refuses everything else."""

    def ask(self, label: str, default: Optional[str] = None) -> str:
        if default is None:
            raise InvalidInputError(f"Missing value for '{label}'")
        return default


def load_payload(path: Path) -> Payload:
    """
    Load a payload from a YAML or JSON document.

    Raises:
        PayloadLoadError: if the file cannot be read or does not describe a payload.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PayloadLoadError(path, "Could not read payload file") from e

    try:
        raw = yaml.safe_load(content)
        return PayloadAdapter.validate_python(raw)
    except (yaml.YAMLError, ValidationError) as e:
        raise PayloadLoadError(path, "Could not parse payload file") from e


class RequestBuilder:
    """Fills a PartialRequest through a ValueSource and validates the result."""

    def __init__(self, source: ValueSource, store: StoreManager):
        self.source = source
        self.store = store

    def _ask_required(self, label: str, parse: Callable[[str], T], default: Optional[str] = None) -> T:
        while True:
            answer = self.source.ask(label, default)
            if not answer:
                if self.source.reprompt:
                    continue
                raise InvalidInputError(f"Empty value for '{label}'")
            try:
                return parse(answer)
            except ValueError as e:
                if not self.source.reprompt:
                    raise InvalidInputError(f"Invalid value for '{label}': {e}") from e
                logger.warning(f"{e}. Please try again.")

    def build(self, partial: PartialRequest) -> Request:
        """
        Resolve every missing field of `partial` and return a complete Request.

        Raises:
            PathInvalidError: if the repository path could not be obtained.
            RepositoryNotFoundError: if the path is not inside a repository.
            PayloadLoadError: if the payload file could not be loaded.
            InvalidInputError: if any other value is missing or invalid.
        """
        repo_path = partial.repo_path
        if repo_path is None:
            try:
                repo_path = Path(self.source.ask("Repository path", str(get_default_repo_path())))
            except InvalidInputError as e:
                raise PathInvalidError() from e

        find_repository(repo_path, self.store)

        package_id = partial.id or self._ask_required("Package identifier", str)

        payload_path = partial.payload_path or self._ask_required("Payload path (yaml or json)", Path)
        payload = load_payload(payload_path)

        channel = partial.channel
        if channel is None:
            channel = self.source.ask("Channel (or none for stable)", "")
        channel = channel or None

        platform = partial.platform or self._ask_required("Platform", str)

        version = partial.version or self._ask_required("New release version", parse_version)

        try:
            return Request(
                repo_path=repo_path,
                id=package_id,
                platform=platform,
                channel=channel,
                version=version,
                payload=payload,
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid request: {e.errors()[0]['msg']}") from e
