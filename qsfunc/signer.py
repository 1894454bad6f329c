#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
QingStor request signature: base64(HMAC-SHA256(secret, string_to_sign)).
"""
import hmac
import base64
import hashlib
import logging
import urllib.parse
from typing import Dict

from . import utils
from .exceptions import SigningError

logger = logging.getLogger(__name__)

#######################################################
### Parameters

signable_query_keys = frozenset([
    'acl',
    'append',
    'cname',
    'cors',
    'delete',
    'image',
    'lifecycle',
    'logging',
    'mirror',
    'notification',
    'part_number',
    'policy',
    'position',
    'replication',
    'stats',
    'upload_id',
    'uploads',
    'response-expires',
    'response-cache-control',
    'response-content-type',
    'response-content-language',
    'response-content-encoding',
    'response-content-disposition',
    ])

#######################################################
### Functions


def sign(key: str, msg: str):
    return hmac.new(key.encode('utf-8'), msg.encode('utf-8'), hashlib.sha256).digest()


def canonicalized_headers(headers: Dict[str, str]):
    """
    The x-qs-* headers with lower cased keys, sorted, one "key:value" line each.
    """
    custom = {}
    for k, v in headers.items():
        k_lower = k.lower()
        if k_lower.startswith(utils.custom_header_prefix):
            custom[k_lower] = str(v).strip()

    return ''.join(f'{k}:{custom[k]}\n' for k in sorted(custom))


def canonicalized_resource(path: str, params: Dict[str, str]):
    """
    The request path followed by the signable query params (sorted, "&" separated, bare key for empty values).
    """
    parts = []
    for key in sorted(params):
        if key not in signable_query_keys:
            continue
        value = params[key]
        if utils.is_empty(value):
            parts.append(key)
        else:
            parts.append(f'{key}={value}')

    if parts:
        return path + '?' + '&'.join(parts)
    else:
        return path


def string_to_sign(method: str, path: str, params: Dict[str, str], headers: Dict[str, str]):
    """
    Builds the canonical string to sign.

    Parameters
    ----------
    method : str
        The http method.
    path : str
        The encoded request path, always including the bucket segment for bucket level requests.
    params : dict
        The canonical (already decoded) query params.
    headers : dict
        The final request headers.

    Returns
    -------
    str
    """
    content_md5 = utils.get_header(headers, utils.content_md5_key, '')
    content_type = utils.get_header(headers, utils.content_type_key, '')

    ## An expiry replaces the date line for presigned urls
    expires = utils.get_header(headers, utils.expires_key)
    if utils.is_empty(expires):
        date = utils.get_header(headers, utils.date_key, '')
    else:
        date = expires

    lines = [method.upper(), str(content_md5), str(content_type), str(date)]

    return '\n'.join(lines) + '\n' + canonicalized_headers(headers) + canonicalized_resource(path, params)


#######################################################
### Main class


class QSAuth:
    """
    Signs canonical strings with an access key pair.
    """
    def __init__(self, access_key_id: str, secret_access_key: str):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key

    def signature(self, str_to_sign: str):
        """
        The base64 encoded HMAC-SHA256 of the string. Any failure is raised as a SigningError.
        """
        try:
            digest = sign(self.secret_access_key, str_to_sign)
            return base64.b64encode(digest).decode('ascii')
        except Exception as err:
            raise SigningError('Auth signature error') from err

    def authorization(self, str_to_sign: str):
        """
        The value of the Authorization header for header signed requests.
        """
        auth = self.format_authorization(self.access_key_id, self.signature(str_to_sign))
        logger.debug('== authorization ==\n%s', auth)

        return auth

    def presigned_signature(self, str_to_sign: str):
        """
        The signature percent-encoded for use as the signature query param of a presigned url.
        """
        return self.quote_signature(self.signature(str_to_sign))

    @staticmethod
    def format_authorization(access_key_id: str, signature: str):
        return f'QS {access_key_id}:{signature}'

    @staticmethod
    def quote_signature(signature: str):
        try:
            return urllib.parse.quote(signature, safe='')
        except Exception as err:
            raise SigningError('Auth signature error') from err
