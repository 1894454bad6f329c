#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hands built requests to a urllib3 pool manager.
"""
import logging
import urllib3
from urllib3.util import Retry, Timeout

from . import utils
from .builder import RequestDescriptor

logger = logging.getLogger(__name__)

#######################################################
### Functions


def url_session(num_pools: int=10, connect_timeout: float=10, read_timeout: float=60, retries: int=0):
    """
    Creates the urllib3 pool manager that built requests are sent through. No retries are made unless asked for.

    Parameters
    ----------
    num_pools : int
        The number of per-host connection pools (zones, virtual host buckets) to keep.
    connect_timeout : float
        Seconds to wait for a connection to the storage endpoint.
    read_timeout : float
        Seconds to wait for response data.
    retries : int
        Retries on connection errors and retryable status codes, with a short backoff.

    Returns
    -------
    urllib3.PoolManager
    """
    timeout = Timeout(connect=connect_timeout, read=read_timeout)
    retry = Retry(total=retries, backoff_factor=0.5, raise_on_status=False)

    return urllib3.PoolManager(num_pools=num_pools, timeout=timeout, retries=retry)


def send(request: RequestDescriptor, session: urllib3.PoolManager=None, preload_content: bool=True, **url_session_kwargs):
    """
    Sends a built request. The body's content type and length are added as headers when the request does not carry them already.

    Parameters
    ----------
    request : RequestDescriptor
        The output of RequestBuilder.build_request.
    session : urllib3.PoolManager or None
        The pool manager to use. None creates one with url_session.
    preload_content : bool
        Passed to urllib3. False leaves the response open for streaming.
    url_session_kwargs
        Passed to url_session when no session is given.

    Returns
    -------
    urllib3.HTTPResponse
    """
    if session is None:
        session = url_session(**url_session_kwargs)

    headers = dict(request.headers)
    body = request.body

    if body.payload is not None:
        if not utils.is_empty(body.content_type) and utils.get_header(headers, utils.content_type_key) is None:
            headers[utils.content_type_key] = body.content_type
        if body.content_length and utils.get_header(headers, utils.content_length_key) is None:
            headers[utils.content_length_key] = str(body.content_length)

    logger.debug('sending %s %s', request.method, request.url)

    return session.request(request.method, request.url, headers=headers, body=body.payload, preload_content=preload_content)
