#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Errors raised while building and signing requests. None of them are retried by qsfunc.
"""


class QSError(Exception):
    """Base class for all qsfunc errors."""


class MalformedUrlError(QSError):
    """The composed request url could not be parsed."""


class SigningError(QSError):
    """Producing a signature failed. The original exception is chained as __cause__."""


class UsageError(QSError):
    """
    The builder was driven down the wrong path for its signing mode, e.g. build_request with an expiry set.
    """


class ConfigurationError(QSError):
    """A required primitive (such as the md5 digest) is not available in this environment."""
