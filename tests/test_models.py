"""Tests for document models: versions, payload union and round-tripping."""

import json

import pytest
from pydantic import ValidationError

from pkgrepo.domain.models import (
    MacOSPackage,
    PackageDescriptor,
    PayloadAdapter,
    RepositoryIndex,
    Request,
    TarballPackage,
    WindowsExecutable,
    parse_version,
    version_key,
)
from pkgrepo.storage.json_store_manager import dump_document

from conftest import PACKAGE_ID, make_payload, make_request


class TestVersion:
    @pytest.mark.parametrize(
        "value",
        ["1.0.0", "0.12.3", "2.0.0-beta.1", "1.0.0+build.5", "2020-04-01T12:00:00Z"],
    )
    def test_accepts_semantic_and_timestamp_versions(self, value):
        assert parse_version(value) == value

    def test_strips_surrounding_whitespace(self):
        assert parse_version("  1.2.3 ") == "1.2.3"

    @pytest.mark.parametrize(
        "value",
        ["2020-04-01T12:00:00+00:00", "2020-04-01T14:00:00+02:00", "2020-04-01T07:00:00-05:00"],
    )
    def test_timestamps_are_normalized_to_utc(self, value):
        assert parse_version(value) == "2020-04-01T12:00:00Z"

    def test_timestamp_fraction_is_kept(self):
        assert parse_version("2020-04-01T12:00:00.500000+00:00") == "2020-04-01T12:00:00.5Z"

    @pytest.mark.parametrize(
        "value",
        ["", "1", "v1.0.0", "1.0.0.0", "01.0.0", "latest", "2021-01-31", "2020-04-01T12:00:00", "2020-13-01T12:00:00Z"],
    )
    def test_rejects_other_strings(self, value):
        with pytest.raises(ValueError):
            parse_version(value)

    def test_build_metadata_does_not_change_identity(self):
        assert version_key("1.0.0+build.7") == version_key("1.0.0")
        assert version_key("1.0.0-beta") != version_key("1.0.0")
        assert version_key("2020-04-01T12:00:00Z") == "2020-04-01T12:00:00Z"


class TestPayload:
    def test_discriminates_on_type(self):
        assert isinstance(
            PayloadAdapter.validate_python({"type": "MacOSPackage", "url": "https://x/p.pkg", "pkg_id": "com.x"}),
            MacOSPackage,
        )
        assert isinstance(
            PayloadAdapter.validate_python({"type": "TarballPackage", "url": "https://x/p.tar.gz"}),
            TarballPackage,
        )
        assert isinstance(
            PayloadAdapter.validate_python({"type": "WindowsExecutable", "url": "https://x/p.exe", "product_code": "P"}),
            WindowsExecutable,
        )

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            PayloadAdapter.validate_python({"type": "DebPackage", "url": "https://x/p.deb"})

    def test_missing_required_field_is_rejected(self):
        with pytest.raises(ValidationError):
            PayloadAdapter.validate_python({"type": "MacOSPackage", "url": "https://x/p.pkg"})


class TestRequest:
    def test_is_immutable(self, tmp_path):
        request = make_request(tmp_path)

        with pytest.raises(ValidationError):
            request.platform = "macos"

    def test_rejects_invalid_version(self, tmp_path):
        with pytest.raises(ValidationError):
            make_request(tmp_path, version="not-a-version")

    def test_rejects_empty_identifiers(self, tmp_path):
        with pytest.raises(ValidationError):
            make_request(tmp_path, id="")

    def test_accepts_payload_as_mapping(self, tmp_path):
        request = Request(
            repo_path=tmp_path,
            id=PACKAGE_ID,
            platform="linux",
            version="1.0.0",
            payload={"type": "TarballPackage", "url": "https://x/p.tar.gz"},
        )

        assert isinstance(request.payload, TarballPackage)
        assert request.channel is None


class TestRoundTrip:
    def test_descriptor_survives_dump_and_reload(self, descriptor_path):
        descriptor = PackageDescriptor.model_validate_json(descriptor_path.read_bytes())

        reloaded = PackageDescriptor.model_validate_json(dump_document(descriptor))

        assert reloaded == descriptor

    def test_unknown_fields_are_preserved(self):
        raw = {
            "package": {"id": PACKAGE_ID, "homepage": "https://example.com"},
            "release": [
                {
                    "version": "1.0.0",
                    "channel": "beta",
                    "min_os": "10.15",
                    "target": [
                        {
                            "platform": "macos",
                            "signed": True,
                            "payload": {
                                "type": "MacOSPackage",
                                "url": "https://x/p.pkg",
                                "pkg_id": "com.x",
                                "targets": ["system"],
                            },
                        }
                    ],
                }
            ],
            "x-generator": "hand written",
        }

        dumped = json.loads(dump_document(PackageDescriptor.model_validate(raw)))

        assert dumped["x-generator"] == "hand written"
        assert dumped["package"]["homepage"] == "https://example.com"
        assert dumped["release"][0]["min_os"] == "10.15"
        assert dumped["release"][0]["channel"] == "beta"
        assert dumped["release"][0]["target"][0]["signed"] is True
        assert dumped["release"][0]["target"][0]["payload"]["targets"] == ["system"]

    def test_payload_type_tag_is_written(self):
        descriptor = PackageDescriptor.model_validate(
            {
                "package": {"id": PACKAGE_ID},
                "release": [{"version": "1.0.0", "target": [{"platform": "windows", "payload": make_payload("A").model_dump()}]}],
            }
        )

        dumped = json.loads(dump_document(descriptor))

        assert dumped["release"][0]["target"][0]["payload"]["type"] == "WindowsExecutable"

    def test_null_valued_fields_survive(self):
        raw = {
            "package": {"id": PACKAGE_ID, "homepage": None},
            "release": [{"version": "1.0.0", "license": None, "target": []}],
            "x-note": None,
        }

        text = dump_document(PackageDescriptor.model_validate(raw))

        assert json.loads(text) == raw
        assert PackageDescriptor.model_validate_json(text) == PackageDescriptor.model_validate(raw)

    def test_defaults_absent_from_the_source_are_not_written(self):
        raw = {"package": {"id": PACKAGE_ID}, "release": [{"version": "1.0.0", "target": []}]}

        assert json.loads(dump_document(PackageDescriptor.model_validate(raw))) == raw


def test_repository_index_requires_url():
    with pytest.raises(ValidationError):
        RepositoryIndex.model_validate({"repository": {"name": {"en": "No URL"}}})
