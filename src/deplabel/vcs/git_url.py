# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module provides methods to validate the form of git remote URLs."""

import logging
import re
import urllib.parse

from deplabel.config.defaults import defaults

logger: logging.Logger = logging.getLogger(__name__)

# e.g., git@github.com:owner/project.git or github.com:owner/project.git
SCP_LIKE_PATTERN = re.compile(r"^(?:(?P<user>[\w.\-]+)@)?(?P<host>[\w.\-]+):(?P<path>[^\s]+)$")


def get_allowed_schemes() -> list[str]:
    """Return the URL schemes accepted for git remotes from the ini configuration."""
    return defaults.get_list("git", "allowed_schemes", fallback=["http", "https", "ssh", "git", "git+ssh", "git+https"])


def parse_git_remote(url: str, allowed_schemes: list[str] | None = None) -> urllib.parse.ParseResult | None:
    """Parse a git remote reference.

    We support the patterns listed in https://git-scm.com/docs/git-clone#_git_urls. Unlike a URL
    normalization, the returned result keeps the scheme, host and path of the original reference.
    scp-like references are returned with the ``ssh`` scheme.

    Parameters
    ----------
    url : str
        The remote reference to parse.
    allowed_schemes : list[str] | None
        The URL schemes accepted. If this is ``None``, fall back to the ``.ini`` configuration.

    Returns
    -------
    urllib.parse.ParseResult | None
        The parse result of the reference or None if it is not a valid git remote.

    Examples
    --------
    >>> parse_git_remote("git@github.com:owner/project.git", ["https"])
    ParseResult(scheme='ssh', netloc='git@github.com', path='owner/project.git', params='', query='', fragment='')
    >>> parse_git_remote("https://github.com", ["https"]) is None
    True
    """
    if allowed_schemes is None:
        allowed_schemes = get_allowed_schemes()

    url = url.strip()
    if not url or any(char.isspace() for char in url):
        return None

    if "://" not in url:
        match = SCP_LIKE_PATTERN.match(url)
        if match is None:
            return None
        path = match.group("path").strip("/")
        if not path:
            return None
        netloc = f"{match.group('user')}@{match.group('host')}" if match.group("user") else match.group("host")
        return urllib.parse.ParseResult(
            scheme="ssh",
            netloc=netloc,
            path=path,
            params="",
            query="",
            fragment="",
        )

    try:
        parsed_url = urllib.parse.urlparse(url)
    except ValueError as error:
        logger.debug(error)
        return None

    if parsed_url.scheme not in allowed_schemes:
        logger.debug("The scheme of %s is not allowed for git remotes.", url)
        return None

    if parsed_url.scheme == "file":
        return parsed_url if parsed_url.path.strip("/") else None

    # e.g., ssh://git@hostname:owner/project.git is parsed with netloc="git@hostname:owner".
    _, _, host_port = parsed_url.netloc.rpartition("@")
    host, _, port = host_port.partition(":")
    if not host:
        return None

    path = parsed_url.path.strip("/")
    if port and not port.isdecimal():
        path = f"{port}/{path}".strip("/")
    if not path:
        return None

    return parsed_url


def is_valid_git_remote(url: str) -> bool:
    """Return True if ``url`` is syntactically a git remote reference.

    Parameters
    ----------
    url : str
        The reference to check.

    Returns
    -------
    bool
        True if the reference is valid else False.
    """
    if parse_git_remote(url) is None:
        logger.debug("URL '%s' is not a valid git remote.", url)
        return False
    return True
