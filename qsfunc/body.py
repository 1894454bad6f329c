#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Body encoders. Each turns the finalized param mapping of a request into a RequestBody.
"""
import io
import os
import orjson
import urllib3
from dataclasses import dataclass
from typing import Union

from . import utils

#######################################################
### Parameters

json_content_type = 'application/json'
octet_content_type = 'application/octet-stream'
form_type_prefix = 'multipart/form-data'

#######################################################
### Functions


def form_content_type(boundary: str):
    return f'{form_type_prefix}; boundary={boundary}'


def form_boundary(content_type: str):
    """
    The boundary of a multipart/form-data content type, or None.
    """
    if not content_type or not content_type.startswith(form_type_prefix):
        return None

    for part in content_type.split(';')[1:]:
        key, _, value = part.strip().partition('=')
        if key.lower() == 'boundary' and value:
            return value.strip('"')

    return None


#######################################################
### Classes


@dataclass
class RequestBody:
    """
    What an encoder hands to the transport. payload is None, bytes or a readable file-like object.
    """
    content_type: str = None
    content_length: int = 0
    payload: Union[bytes, io.IOBase, None] = None


def _to_payload(value):
    """

    """
    if isinstance(value, str):
        return value.encode('utf-8')
    elif isinstance(value, (bytes, bytearray)):
        return bytes(value)
    elif hasattr(value, 'read'):
        return value
    else:
        return str(value).encode('utf-8')


def _payload_length(payload, content_length):
    if isinstance(payload, bytes):
        return len(payload)
    else:
        return content_length


class NormalBodyEncoder:
    """
    Default encoder. A "Body" param is sent as is, any other params are sent as a JSON document.
    """
    @staticmethod
    def get_body_content(params: dict):
        """
        The body content before it is turned into bytes: the raw "Body" value when there is one, else the JSON text of the params, else None.

        Parameters
        ----------
        params : dict
            The body params.

        Returns
        -------
        str, bytes, file-like or None
        """
        if not params:
            return None

        if utils.body_key in params:
            return params[utils.body_key]

        return orjson.dumps(params).decode('utf-8')

    def get_request_body(self, content_type: str, content_length: int, method: str, params: dict, query: dict):
        """

        """
        content = self.get_body_content(params)
        if content is None:
            return RequestBody(content_type, content_length, None)

        if utils.is_empty(content_type) and utils.body_key not in params:
            content_type = json_content_type

        payload = _to_payload(content)

        return RequestBody(content_type, _payload_length(payload, content_length), payload)


class MultipartUploadBodyEncoder:
    """
    Encoder for one part of a multipart upload. Only the "Body" param is sent.
    """
    def get_request_body(self, content_type: str, content_length: int, method: str, params: dict, query: dict):
        """

        """
        if utils.is_empty(content_type):
            content_type = octet_content_type

        content = params.get(utils.body_key)
        if content is None:
            return RequestBody(content_type, 0, None)

        payload = _to_payload(content)

        return RequestBody(content_type, _payload_length(payload, content_length), payload)


class FormBodyEncoder:
    """
    multipart/form-data encoder for POST object uploads. The boundary is taken from a multipart/form-data content type when one is given, so the encoded form matches the signed Content-Type header. The length always comes from the encoded form.
    """
    @staticmethod
    def _to_field(value):
        if isinstance(value, (str, bytes, tuple)):
            return value
        elif hasattr(value, 'read'):
            name = os.path.basename(getattr(value, 'name', 'file'))
            return (name, value.read(), octet_content_type)
        else:
            return str(value)

    def get_request_body(self, content_type: str, content_length: int, method: str, params: dict, query: dict):
        """

        """
        boundary = form_boundary(content_type)
        fields = {k: self._to_field(v) for k, v in params.items()}
        payload, encoded_content_type = urllib3.encode_multipart_formdata(fields, boundary=boundary)

        return RequestBody(encoded_content_type, len(payload), payload)
