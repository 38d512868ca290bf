"""Shared fixtures: temporary repositories on disk."""

import json
from pathlib import Path

import pytest

from pkgrepo.domain.models import Request, WindowsExecutable
from pkgrepo.services.updater import PackageUpdater
from pkgrepo.storage.json_store_manager import JsonStoreManager

PACKAGE_ID = "example-keyboard"

REPOSITORY_INDEX = {
    "repository": {
        "url": "https://packages.example.com/main",
        "name": {"en": "Example repository"},
        "channels": ["beta", "nightly"],
    }
}


def make_payload(name: str) -> WindowsExecutable:
    return WindowsExecutable(
        url=f"https://downloads.example.com/{name}.exe",
        product_code=f"{{{name}}}",
        size=1024,
        kind="inno",
    )


def write_json(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def make_request(repo_root: Path, **overrides) -> Request:
    fields = dict(
        repo_path=repo_root,
        id=PACKAGE_ID,
        platform="windows",
        channel=None,
        version="1.0.0",
        payload=make_payload("P1"),
    )
    fields.update(overrides)
    return Request(**fields)


@pytest.fixture
def store() -> JsonStoreManager:
    return JsonStoreManager()


@pytest.fixture
def updater(store) -> PackageUpdater:
    return PackageUpdater(store)


@pytest.fixture
def repo_root(tmp_path) -> Path:
    """A repository with one package: release 1.0.0 (stable) holding a windows target with payload P1."""
    root = tmp_path / "repo"
    write_json(root / "index.json", REPOSITORY_INDEX)
    write_json(
        root / "packages" / PACKAGE_ID / "index.json",
        {
            "package": {
                "id": PACKAGE_ID,
                "name": {"en": "Example Keyboard"},
                "description": {"en": "Keyboard layout for testing"},
            },
            "release": [
                {
                    "version": "1.0.0",
                    "authors": ["Jane Doe"],
                    "target": [
                        {
                            "platform": "windows",
                            "payload": make_payload("P1").model_dump(exclude_none=True),
                        }
                    ],
                }
            ],
        },
    )
    return root


@pytest.fixture
def descriptor_path(repo_root) -> Path:
    return repo_root / "packages" / PACKAGE_ID / "index.json"
