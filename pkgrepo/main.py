import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from pkgrepo.core.dependencies import get_default_repo_path, get_log_level, get_store, get_updater
from pkgrepo.domain.exceptions import InvalidInputError, PkgRepoError
from pkgrepo.domain.models import PartialRequest
from pkgrepo.services.locator import find_repository
from pkgrepo.services.request_builder import (
    InteractiveValueSource,
    NonInteractiveValueSource,
    RequestBuilder,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgrepo",
        description="Manage releases in a package repository.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (overrides PKGREPO_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser(
        "update",
        help="Insert or update a release target for a package",
        description="Insert or update a release target. Missing values are prompted for.",
    )
    update.add_argument("--repo", type=Path, dest="repo_path", help="Path inside the repository")
    update.add_argument("--id", dest="package_id", help="Package identifier")
    update.add_argument("--platform", help="Target platform (e.g. windows, macos)")
    update.add_argument("--channel", help="Release channel (omit for stable)")
    update.add_argument("--version", dest="release_version", help="Release version")
    update.add_argument("--payload", type=Path, dest="payload_path", help="Payload file (yaml or json)")
    update.add_argument(
        "--no-input",
        action="store_true",
        help="Fail instead of prompting for missing values",
    )

    locate = subparsers.add_parser(
        "locate",
        help="Print the root of the repository enclosing a path",
    )
    locate.add_argument("path", nargs="?", type=Path, help="Start path (defaults to PKGREPO_PATH or the working directory)")

    return parser


def format_error_chain(error: BaseException) -> str:
    """Render an exception followed by each of its causes, one per line."""
    lines = [f"Error: {error}"]
    cause = error.__cause__
    while cause is not None:
        lines.append(f"  Caused by: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)


def _run_update(args: argparse.Namespace) -> None:
    try:
        partial = PartialRequest(
            repo_path=args.repo_path,
            id=args.package_id,
            platform=args.platform,
            channel=args.channel,
            version=args.release_version,
            payload_path=args.payload_path,
        )
    except ValidationError as e:
        raise InvalidInputError(f"Invalid argument: {e.errors()[0]['msg']}") from e
    source = NonInteractiveValueSource() if args.no_input else InteractiveValueSource()
    request = RequestBuilder(source, get_store()).build(partial)
    get_updater().run(request)


def _run_locate(args: argparse.Namespace) -> None:
    start = args.path if args.path is not None else get_default_repo_path()
    print(find_repository(start, get_store()))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == "update":
            _run_update(args)
        elif args.command == "locate":
            _run_locate(args)
    except PkgRepoError as e:
        print(format_error_chain(e), file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
