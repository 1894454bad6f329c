#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Builds signed, transport ready requests (or presigned urls) out of an environment, an operation and its classified params.
"""
import enum
import base64
import hashlib
import logging
from dataclasses import dataclass, field
import urllib3
import urllib3.filepost
from urllib3.exceptions import LocationParseError

from . import utils
from .body import RequestBody, NormalBodyEncoder, MultipartUploadBodyEncoder, FormBodyEncoder, json_content_type, octet_content_type, form_content_type
from .config import EnvironmentContext, OperationContext, ParamSet, UrlStyle
from .exceptions import ConfigurationError, MalformedUrlError, UsageError
from .signer import QSAuth, string_to_sign

logger = logging.getLogger(__name__)

#######################################################
### Functions


def content_md5(api_name: str, body_params: dict):
    """
    The base64 md5 of the body for Delete Multiple Objects requests, otherwise None. The digest is taken over the string form of the normal body content, exactly as the service expects it.

    Parameters
    ----------
    api_name : str
        The API name of the operation.
    body_params : dict
        The classified body params.

    Returns
    -------
    str or None
    """
    if api_name != utils.api_delete_multiple_objects or not body_params:
        return None

    body_content = NormalBodyEncoder.get_body_content(body_params)

    try:
        md5 = hashlib.new('md5')
    except ValueError as err:
        raise ConfigurationError('md5 digest is not available') from err

    md5.update(str(body_content).encode('utf-8'))

    return base64.b64encode(md5.digest()).decode('ascii')


#######################################################
### Classes


class SignatureState(enum.Enum):
    UNSIGNED = 0
    SIGNED = 1


@dataclass
class RequestDescriptor:
    method: str
    url: str
    headers: dict = field(default_factory=dict)
    body: RequestBody = field(default_factory=RequestBody)


class RequestBuilder:
    """
    Builds one request. Create it per operation, call build_request (or build_presigned_url when the operation has an expiry) and discard it.
    """
    def __init__(self, env: EnvironmentContext, operation: OperationContext, params: ParamSet=None):
        """
        Normalizes the headers and composes the url. Signing is deferred until the signature is first needed.

        Parameters
        ----------
        env : EnvironmentContext
            The shared connection environment. It is never modified; see set_signature.
        operation : OperationContext
            The API call to build.
        params : ParamSet or None
            The classified query, body, header and form data params.
        """
        if params is None:
            params = ParamSet()

        self.env = env
        self.operation = operation
        self.method = operation.request_method.upper()

        self._query = dict(params.query)
        self._body = dict(params.body)
        self._form_data = dict(params.form_data)
        self._headers = dict(params.headers)

        self._state = SignatureState.UNSIGNED
        self._signature = None

        self._init_headers()
        self._init_url()

    @property
    def zone(self):
        if self.operation.zone:
            return self.operation.zone
        return self.env.zone

    @property
    def is_presigned(self):
        return self.operation.is_presigned

    @property
    def headers(self):
        return dict(self._headers)

    @property
    def query(self):
        return dict(self._query)

    @property
    def state(self):
        return self._state

    def _default_content_type(self):
        """
        The content type the selected body encoder will send, so that it is covered by the signature. None for raw Body payloads and empty bodies.
        """
        if self._form_data:
            return form_content_type(urllib3.filepost.choose_boundary())
        elif self.operation.api_name == utils.api_upload_multipart:
            return octet_content_type
        elif self._body and utils.body_key not in self._body:
            return json_content_type

        return None

    def _init_headers(self):
        """
        Applies the header passes in order: metadata, date, user agent, body content type, presigned reset, content md5 and the ascii encoding.
        """
        headers = self._headers

        metadata = headers.pop(utils.metadata_key, None)
        if metadata:
            headers.update(metadata)

        if utils.get_header(headers, utils.date_key) is None:
            headers[utils.date_key] = utils.http_date()

        user_agent = self.env.additional_user_agent
        if user_agent is not None:
            headers[utils.user_agent_key] = user_agent

        if utils.get_header(headers, utils.content_type_key) is None:
            content_type = self._default_content_type()
            if content_type is not None:
                headers[utils.content_type_key] = content_type

        if self.is_presigned:
            headers = {utils.expires_key: str(self.operation.expires)}

        md5 = content_md5(self.operation.api_name, self._body)
        if md5 is not None:
            headers[utils.content_md5_key] = md5

        self._headers = utils.encode_header_params(headers)

    def _base_url(self):
        """
        The endpoint with the zone and bucket applied according to the url style.
        """
        request_url = self.env.request_url
        bucket = self.operation.bucket_name
        if utils.is_empty(bucket):
            return request_url

        zone = self.zone
        if zone:
            zone_prefix = zone + '.'
        else:
            zone_prefix = ''

        if self.env.request_url_style == UrlStyle.PATH_STYLE:
            return request_url.replace('://', '://' + zone_prefix, 1) + '/' + bucket
        else:
            return request_url.replace('://', f'://{bucket}.{zone_prefix}', 1)

    def _suffix_path(self):
        """

        """
        suffix = self.operation.request_path.replace(utils.path_prefix + utils.bucket_placeholder, '')

        object_name = self.operation.object_name
        if object_name is not None:
            suffix = suffix.replace(utils.object_placeholder, utils.ascii_encoding(object_name))
        else:
            suffix = suffix.replace(utils.path_prefix + utils.object_placeholder, '').replace(utils.object_placeholder, '')

        return suffix

    def _init_url(self):
        """
        Composes the request url and replaces the query params with the ones parsed back out of it.
        """
        request_url = utils.generate_url(self._query, self._base_url() + self._suffix_path())

        try:
            url = urllib3.util.parse_url(request_url)
        except LocationParseError as err:
            raise MalformedUrlError(f'the request url is malformed: {request_url}') from err

        if not url.scheme or not url.host:
            raise MalformedUrlError(f'the request url is malformed: {request_url}')

        self.request_url = request_url
        self._url = url
        self._query = utils.first_query_values(url.query)

        logger.debug('== request_url ==\n%s', request_url)

    def _signing_path(self):
        path = self._url.path or utils.path_prefix
        bucket = self.operation.bucket_name
        if (self.env.request_url_style == UrlStyle.VIRTUAL_HOST_STYLE) and not utils.is_empty(bucket):
            path = utils.path_prefix + bucket + path

        return path

    def get_string_to_sign(self):
        """
        The canonical string to sign for the current headers and query params.
        """
        return string_to_sign(self.method, self._signing_path(), self._query, self._headers)

    def get_signature(self):
        """
        Returns the signature, computing it on first use only. In header mode it is the Authorization header value (an Authorization header set beforehand is used as is). In presigned mode it is the url encoded signature.

        Returns
        -------
        str
        """
        if self._state is SignatureState.SIGNED:
            return self._signature

        if not self.is_presigned:
            existing = self._headers.get(utils.authorization_key)
            if not utils.is_empty(existing):
                self._signature = existing
                self._state = SignatureState.SIGNED
                return existing

        auth = QSAuth(self.env.access_key_id, self.env.secret_access_key)
        str_to_sign = self.get_string_to_sign()
        logger.debug('== string_to_sign ==\n%s', str_to_sign)

        if self.is_presigned:
            signature = auth.presigned_signature(str_to_sign)
        else:
            signature = auth.authorization(str_to_sign)
            self._headers[utils.authorization_key] = signature

        self._signature = signature
        self._state = SignatureState.SIGNED

        return signature

    def set_header(self, key: str, value: str):
        """
        Sets a header as is, without any encoding. Setting the Authorization header also sets (or, with an empty value, clears) the signature.
        """
        self._headers[key] = value

        if key == utils.authorization_key:
            if utils.is_empty(value):
                self._signature = None
                self._state = SignatureState.UNSIGNED
            else:
                self._signature = value
                self._state = SignatureState.SIGNED

    def set_signature(self, access_key_id: str, signature: str):
        """
        Uses a signature computed elsewhere. The builder switches to a copy of its environment carrying access_key_id (available afterwards as builder.env); the environment passed in is left untouched.

        Parameters
        ----------
        access_key_id : str
            The access key id the signature was made with.
        signature : str
            The raw base64 signature.
        """
        self.env = self.env.with_access_key_id(access_key_id)

        if self.is_presigned:
            signature = QSAuth.quote_signature(signature)
        else:
            signature = QSAuth.format_authorization(access_key_id, signature)
            self._headers[utils.authorization_key] = signature

        self._signature = signature
        self._state = SignatureState.SIGNED

    def get_request_body(self, encoder=None):
        """
        Signs the request if needed and encodes the body. Without an explicit encoder the form encoder is used for form data, the multipart encoder for Upload Multipart and the normal encoder otherwise.

        Parameters
        ----------
        encoder : object or None
            Anything with a get_request_body(content_type, content_length, method, params, query) method.

        Returns
        -------
        RequestBody
        """
        self.get_signature()

        content_type = utils.get_header(self._headers, utils.content_type_key)
        content_length = utils.get_header(self._headers, utils.content_length_key)
        if utils.is_empty(content_length):
            content_length = 0
        else:
            content_length = int(content_length)

        if encoder is not None:
            return encoder.get_request_body(content_type, content_length, self.method, self._body, self._query)

        if self._form_data:
            return FormBodyEncoder().get_request_body(content_type, content_length, self.method, self._form_data, self._query)
        elif self.operation.api_name == utils.api_upload_multipart:
            return MultipartUploadBodyEncoder().get_request_body(content_type, content_length, self.method, self._body, self._query)
        else:
            return NormalBodyEncoder().get_request_body(content_type, content_length, self.method, self._body, self._query)

    def build_request(self, body: RequestBody=None):
        """
        Returns the signed RequestDescriptor. Not allowed for operations with an expiry.

        Parameters
        ----------
        body : RequestBody or None
            A body encoded elsewhere. None encodes it with get_request_body.

        Returns
        -------
        RequestDescriptor
        """
        if self.is_presigned:
            raise UsageError('The operation has an expiry, use build_presigned_url instead.')

        if body is None:
            body = self.get_request_body()
        else:
            self.get_signature()

        return RequestDescriptor(self.method, self.request_url, dict(self._headers), body)

    def build_presigned_url(self):
        """
        Returns the url with access_key_id, expires and signature query params. Only allowed for operations with an expiry.

        Returns
        -------
        str
        """
        if not self.is_presigned:
            raise UsageError('There is no expires param, use build_request instead.')

        signature = self.get_signature()

        object_name = utils.ascii_encoding(self.operation.object_name)
        request_path = self.operation.request_path.replace(utils.path_prefix + utils.bucket_placeholder, '').replace(utils.path_prefix + utils.object_placeholder, object_name)

        if request_path.find('?') > 0:
            sep = '&'
        else:
            sep = '?'

        expires_url = f'{self._base_url()}/{request_path}{sep}access_key_id={self.env.access_key_id}&expires={self.operation.expires}&signature={signature}'

        return utils.generate_url(self._query, expires_url)
