# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module tests generating the metadata label of an image."""

import os
from pathlib import Path

import pytest

import deplabel
from deplabel.collaborators import HeadCommit
from deplabel.errors import PackageDatabaseNotFoundError, UnsupportedVcsProtocolError
from deplabel.labeler import Labeler, get_provenance
from tests.mock_collaborators import MockImageReader, MockReachabilityChecker, MockVcsInspector

RESOURCES_DIR = Path(__file__).parent.joinpath("additional_sources", "resources")

STATUS_DB = b"""Package: libgcc1
Status: install ok installed
Architecture: amd64
Source: gcc-8 (8.3.0-6ubuntu1~18.04.1)
Version: 1:8.3.0-6ubuntu1~18.04.1
"""


@pytest.fixture()
def labeler() -> Labeler:
    """Return a labeler over an image with one package."""
    return Labeler(
        image_reader=MockImageReader(
            package_database=STATUS_DB,
            apt_sources=["deb http://archive.ubuntu.com/ubuntu/ bionic main"],
            os_release={"ID": "ubuntu", "VERSION_ID": "18.04"},
        ),
        vcs_inspector=MockVcsInspector(
            head_commit=HeadCommit(
                remote_url="https://github.com/example/example.git",
                commit_sha="0123456789abcdef0123456789abcdef01234567",
                refs=("v1.0",),
            )
        ),
        reachability_checker=MockReachabilityChecker(),
    )


def test_get_provenance() -> None:
    """Test that the provenance names the labelling tool."""
    provenance = get_provenance()
    assert provenance.name == "deplabel"
    assert provenance.version == deplabel.__version__
    assert provenance.url == "https://github.com/oracle/deplabel"


def test_generate(labeler: Labeler) -> None:
    """Test generating a label from the image, the host repository and additional sources files."""
    metadata = labeler.generate(
        "/path/to/repo",
        [
            os.path.join(RESOURCES_DIR, "mixed_sources.yml"),
            os.path.join(RESOURCES_DIR, "single_archive.yml"),
        ],
    )
    serialized = metadata.to_dict()

    assert serialized["base"] == {"ID": "ubuntu", "VERSION_ID": "18.04"}
    assert serialized["provenance"][0]["name"] == "deplabel"

    dependencies = serialized["dependencies"]
    assert [(dependency["source"]["type"], dependency["source"]["metadata"]["url"]) for dependency in dependencies] == [
        ("debian-package-list", "file:///var/lib/dpkg/status"),
        ("git", "https://github.com/example/example.git"),
        ("archive", "https://example.com/first.tar.gz"),
        ("archive", "https://example.com/second.zip"),
        ("archive", "https://example.com/ca-certificates_20180409.tar.xz"),
    ]
    # The host repository wins over the same repository declared as an additional source.
    assert dependencies[1]["source"]["version"] == {"commit": "0123456789abcdef0123456789abcdef01234567"}
    assert dependencies[1]["source"]["metadata"]["refs"] == ["v1.0"]


def test_generate_without_git(labeler: Labeler) -> None:
    """Test generating a label without a host repository or additional sources."""
    metadata = labeler.generate(None)
    assert [dependency.source.source_type.value for dependency in metadata.dependencies] == ["debian-package-list"]


def test_generate_is_deterministic(labeler: Labeler) -> None:
    """Test that the same inputs produce the same label."""
    paths = [os.path.join(RESOURCES_DIR, "single_vcs.yml")]
    assert labeler.generate("/path/to/repo", paths) == labeler.generate("/path/to/repo", paths)


def test_generate_fails_on_invalid_sources(labeler: Labeler) -> None:
    """Test that an invalid additional sources file fails the whole run."""
    with pytest.raises(UnsupportedVcsProtocolError):
        labeler.generate("/path/to/repo", [os.path.join(RESOURCES_DIR, "unsupported_protocol.yml")])


def test_generate_without_package_database() -> None:
    """Test that an image without a package-status database cannot be labelled."""
    labeler = Labeler(
        image_reader=MockImageReader(package_database=None),
        vcs_inspector=MockVcsInspector(),
        reachability_checker=MockReachabilityChecker(),
    )
    with pytest.raises(PackageDatabaseNotFoundError):
        labeler.generate(None)
