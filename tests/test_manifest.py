"""
Tests for the manifest data model and its JSON wire format
"""

import json

import pytest
from pydantic import ValidationError

from packsync.models import FileDescriptor, Manifest

MANIFEST_JSON = json.dumps({
    "forgeVersion": "47.2.0",
    "files": [
        {"fileName": "mod-a.jar", "checksum": "abc123", "rootModId": "modA"},
        {"fileName": "mod-b.jar", "checksum": "def456", "rootModId": "modB"},
    ]
})


def test_load_reads_wire_field_names():
    manifest = Manifest.load(MANIFEST_JSON)

    assert manifest.forge_version == "47.2.0"
    assert [f.file_name for f in manifest.files] == ["mod-a.jar", "mod-b.jar"]
    assert manifest.files[1].checksum == "def456"
    assert manifest.files[1].owner_module_id == "modB"


def test_load_accepts_bytes_and_missing_forge_version():
    manifest = Manifest.load(b'{"files": [{"fileName": "a.jar", "checksum": "1", "rootModId": "a"}]}')

    assert manifest.forge_version is None
    assert len(manifest.files) == 1


def test_to_json_uses_wire_field_names():
    manifest = Manifest.load(MANIFEST_JSON)

    document = json.loads(manifest.to_json())

    assert document["forgeVersion"] == "47.2.0"
    assert document["files"][0] == {"fileName": "mod-a.jar", "checksum": "abc123", "rootModId": "modA"}


def test_manifest_is_immutable():
    manifest = Manifest.load(MANIFEST_JSON)

    with pytest.raises(ValidationError):
        manifest.files[0].checksum = "changed"
    with pytest.raises(ValidationError):
        manifest.forge_version = "48"


def test_empty_checksum_is_rejected():
    """Manifest checksums can never equal the missing-file sentinel"""
    with pytest.raises(ValidationError):
        FileDescriptor(file_name="a.jar", checksum="", owner_module_id="a")


def test_invalid_document_is_rejected():
    with pytest.raises(ValidationError):
        Manifest.load('{"files": [{"fileName": "a.jar"}]}')
    with pytest.raises(ValidationError):
        Manifest.load("not json")


def test_find_by_file_name():
    manifest = Manifest.load(MANIFEST_JSON)

    assert manifest.find("mod-b.jar").owner_module_id == "modB"
    assert manifest.find("other.jar") is None
