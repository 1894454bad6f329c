#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constants and canonicalization helpers shared by the builder, the signer and the body encoders.
"""
import urllib.parse
import datetime
from email.utils import format_datetime
from urllib.parse import urlparse

#######################################################
### Parameters

bucket_placeholder = '<bucket-name>'
object_placeholder = '<object-key>'

path_prefix = '/'

## Header keys
metadata_key = 'X-QS-MetaData'
user_agent_key = 'User-Agent'
expires_key = 'Expires'
date_key = 'Date'
authorization_key = 'Authorization'
content_md5_key = 'Content-MD5'
content_type_key = 'Content-Type'
content_length_key = 'Content-Length'

custom_header_prefix = 'x-qs-'

## API names that change how a request is built
api_delete_multiple_objects = 'Delete Multiple Objects'
api_upload_multipart = 'Upload Multipart'

## Body parameter holding a raw payload instead of JSON fields
body_key = 'Body'

## Characters left literal when encoding object keys and header values
ascii_safe = '/=:*'

max_ascii = 127

#######################################################
### Helper Functions


def is_url(url):
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except AttributeError:
        return False


def is_empty(value):
    """
    True for None and empty strings.
    """
    return (value is None) or (value == '')


def has_non_ascii(value: str):
    """

    """
    return any(ord(c) > max_ascii for c in value)


def ascii_encoding(value: str):
    """
    Percent-encodes every character except letters, digits, "-", "_", ".", "*", "/", "=" and ":" using the UTF-8 bytes of the string. Spaces become %20. The result is reversible with urllib.parse.unquote.

    Parameters
    ----------
    value : str
        The raw string, typically an object key or a header value.

    Returns
    -------
    str
    """
    if is_empty(value):
        return ''

    return urllib.parse.quote(value, safe=ascii_safe).replace('~', '%7E')


def encode_header_params(headers: dict):
    """
    Returns a new header dict where every value is a str and any value holding a code point above 127 has been ascii encoded.
    """
    new_headers = {}
    for key, value in headers.items():
        value = str(value)
        if has_non_ascii(value):
            value = ascii_encoding(value)
        new_headers[key] = value

    return new_headers


def get_header(headers: dict, key: str, default=None):
    """
    Case insensitive header lookup.
    """
    key_lower = key.lower()
    for k, v in headers.items():
        if k.lower() == key_lower:
            return v

    return default


def http_date(dt: datetime.datetime=None):
    """
    Formats a datetime (default now) as an RFC 7231 GMT date, e.g. 'Wed, 15 Nov 2023 22:13:20 GMT'.
    """
    if dt is None:
        dt = datetime.datetime.now(datetime.timezone.utc)
    else:
        dt = dt.astimezone(datetime.timezone.utc)

    return format_datetime(dt, usegmt=True)


def quote_query_value(value):
    """

    """
    return urllib.parse.quote(str(value), safe='-_.~')


def generate_url(params: dict, request_url: str):
    """
    Appends the query params to the url as a canonical query string. Keys are sorted, keys and values are percent-encoded and params with empty values are added as a bare key.

    Parameters
    ----------
    params : dict
        The query parameters.
    request_url : str
        The url, which may already carry a query string.

    Returns
    -------
    str
    """
    if not params:
        return request_url

    parts = []
    for key in sorted(params):
        value = params[key]
        if is_empty(value):
            parts.append(quote_query_value(key))
        else:
            parts.append(quote_query_value(key) + '=' + quote_query_value(value))

    query_str = '&'.join(parts)

    if '?' in request_url:
        return request_url + '&' + query_str
    else:
        return request_url + '?' + query_str


def first_query_values(query: str):
    """
    Parses a raw (still encoded) query string into a dict. When a key is repeated only its first value is kept.

    Parameters
    ----------
    query : str or None
        The query part of a url without the leading "?".

    Returns
    -------
    dict
    """
    params = {}
    if not query:
        return params

    for key, value in urllib.parse.parse_qsl(query, keep_blank_values=True):
        if key not in params:
            params[key] = value

    return params
