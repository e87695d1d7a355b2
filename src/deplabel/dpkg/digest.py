# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module computes the digest of a package-list snapshot."""

import hashlib
import json

from deplabel.errors import DigestError
from deplabel.metadata import PackageListSnapshot

#: HTML-sensitive characters and line separators are written as ``\uXXXX`` escapes in the digested serialization.
#: They can only occur inside JSON strings, so replacing them keeps the document valid.
ESCAPED_CHARACTERS = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def serialize_snapshot(snapshot: PackageListSnapshot) -> str:
    r"""Return the serialization of a snapshot that the digest is computed over.

    The snapshot is written as compact JSON with a fixed key order, followed by a newline.

    Examples
    --------
    >>> print(serialize_snapshot(PackageListSnapshot(apt_sources=("deb <mirror> bionic main",))), end="")
    {"packages":[],"apt_sources":["deb \u003cmirror\u003e bionic main"]}
    """
    serialized = json.dumps(snapshot.to_dict(), separators=(",", ":"), ensure_ascii=False)
    for character, escape in ESCAPED_CHARACTERS.items():
        serialized = serialized.replace(character, escape)
    return serialized + "\n"


def compute_digest(snapshot: PackageListSnapshot) -> str:
    """Return the SHA-256 hex digest of a package-list snapshot.

    The digest only depends on the content of the snapshot and on the order of its packages and apt sources.

    Parameters
    ----------
    snapshot : PackageListSnapshot
        The snapshot to digest.

    Returns
    -------
    str
        The lowercase hex digest.

    Raises
    ------
    DigestError
        If the snapshot cannot be serialized.
    """
    try:
        serialized = serialize_snapshot(snapshot)
    except (TypeError, ValueError) as error:
        raise DigestError(f"cannot serialize the package-list snapshot: {error}") from error

    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
