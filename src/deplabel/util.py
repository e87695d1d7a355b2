# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module includes utilities functions for deplabel."""

import logging
import time
from datetime import datetime

import requests
from requests.models import Response

from deplabel.collaborators import ReachabilityChecker, UrlKind
from deplabel.config.defaults import defaults
from deplabel.errors import SourceUnreachableError
from deplabel.vcs.git_inspector import ls_remote

logger: logging.Logger = logging.getLogger(__name__)

# The status codes for which a request is attempted again.
RETRY_STATUS_CODES = (403, 429)


def _send_http_raw(method: str, url: str, headers: dict | None, timeout: int | None) -> Response | None:
    """Send an HTTP request and retry it while the server reports a rate limit.

    Returns the last response received, which can have an error status code, or None on a connection error.
    """
    if not timeout:
        timeout = defaults.getint("requests", "timeout", fallback=10)
    error_retries = defaults.getint("requests", "error_retries", fallback=5)
    retry_counter = error_retries
    try:
        response = requests.request(
            method, url=url, headers=headers, timeout=timeout, allow_redirects=True, stream=True
        )
        while response.status_code in RETRY_STATUS_CODES and retry_counter > 0:
            logger.debug("Receiving error code %s from server.", response.status_code)
            response.close()
            check_rate_limit(response)
            retry_counter = retry_counter - 1
            response = requests.request(
                method, url=url, headers=headers, timeout=timeout, allow_redirects=True, stream=True
            )
    except requests.exceptions.RequestException as error:
        logger.debug(error)
        return None

    # The body is never needed, only the status of the response.
    response.close()
    if response.status_code in RETRY_STATUS_CODES:
        logger.debug("Maximum retries reached: %s", error_retries)
    return response


def send_head_http_raw(url: str, headers: dict | None = None, timeout: int | None = None) -> Response | None:
    """Send the HEAD HTTP request with the given url and headers.

    Parameters
    ----------
    url : str
        The url of the request.
    headers : dict | None
        The dict that describes the headers of the request.
    timeout: int | None
        The request timeout (optional).

    Returns
    -------
    Response | None
        The response of the request with a status code of 200 (OK), or ``None`` if the request failed.
    """
    logger.debug("HEAD - %s", url)
    response = _send_http_raw("HEAD", url, headers, timeout)
    if response is None or response.status_code != 200:
        return None
    return response


def send_get_http_raw(url: str, headers: dict | None = None, timeout: int | None = None) -> Response | None:
    """Send the GET HTTP request with the given url and headers, without downloading the body.

    Parameters
    ----------
    url : str
        The url of the request.
    headers : dict | None
        The dict that describes the headers of the request.
    timeout: int | None
        The request timeout (optional).

    Returns
    -------
    Response | None
        The response of the request with a status code of 200 (OK), or ``None`` if the request failed.
    """
    logger.debug("GET - %s", url)
    response = _send_http_raw("GET", url, headers, timeout)
    if response is None or response.status_code != 200:
        return None
    return response


def check_rate_limit(response: Response) -> None:
    """Wait until the rate limit reported by the server is reset.

    Both the ``Retry-After`` header and the GitHub ``X-RateLimit-*`` headers are supported.

    Parameters
    ----------
    response : Response
        The latest response from the server.
    """
    retry_after = response.headers.get("Retry-After", "")
    if retry_after.isdecimal():
        logger.info("Rate limited. Waiting %s seconds before retrying.", retry_after)
        time.sleep(int(retry_after))
        return

    if "X-RateLimit-Remaining" in response.headers:
        remains = int(response.headers["X-RateLimit-Remaining"])
    else:
        remains = 2

    if remains <= 1:
        rate_limit_reset = response.headers.get("X-RateLimit-Reset", default="")

        if not rate_limit_reset:
            return

        try:
            reset_time = float(rate_limit_reset)
        except ValueError:
            logger.critical("X-RateLimit-Reset=%s in the response's header is not a valid number.", rate_limit_reset)
            return

        time_to_sleep: float = reset_time - datetime.timestamp(datetime.now()) + 1
        if time_to_sleep > 0:
            logger.info("Exceeding rate limit. Sleep for %s seconds until %s.", time_to_sleep, reset_time)
            time.sleep(time_to_sleep)


class NetworkReachabilityChecker(ReachabilityChecker):
    """Check archives over HTTP and git remotes with ``git ls-remote``."""

    def check_url(self, url: str, kind: UrlKind) -> None:
        """Check that ``url`` can be reached.

        Archives are checked with a HEAD request first. Some servers reject HEAD requests, so a GET request
        is sent before the archive is reported as unreachable.

        Parameters
        ----------
        url : str
            The URL to check.
        kind : UrlKind
            The kind of the URL.

        Raises
        ------
        SourceUnreachableError
            If the URL cannot be reached.
        """
        if kind == UrlKind.GIT_REMOTE:
            ls_remote(url, "HEAD")
            return

        if send_head_http_raw(url) is not None:
            return
        if send_get_http_raw(url) is not None:
            return

        raise SourceUnreachableError(url, "the archive cannot be downloaded")
