#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Typed configuration for request building: the shared environment, the per-call operation and the classified params.
"""
import os
import enum
from dataclasses import dataclass, field
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from . import utils

#######################################################
### Parameters

default_host = 'qingstor.com'
default_port = 443
default_protocol = 'https'
default_request_path = '/<bucket-name>/<object-key>'

env_fields = ('access_key_id', 'secret_access_key', 'host', 'port', 'protocol', 'zone', 'request_url', 'request_url_style', 'additional_user_agent')

#######################################################
### Classes


class UrlStyle(str, enum.Enum):
    PATH_STYLE = 'path_style'
    VIRTUAL_HOST_STYLE = 'virtual_host_style'


class EnvironmentContext(BaseModel):
    """
    The connection environment shared by every request built against one account. It is frozen: use with_access_key_id (or model_copy) to derive a changed copy.
    """
    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: str
    request_url: str = f'{default_protocol}://{default_host}:{default_port}'
    zone: Optional[str] = None
    request_url_style: UrlStyle = UrlStyle.PATH_STYLE
    additional_user_agent: Optional[str] = None

    @field_validator('request_url')
    @classmethod
    def _check_request_url(cls, value: str):
        if (value.count('://') != 1) or not utils.is_url(value):
            raise ValueError(f'{value} must be of the form scheme://host with exactly one "://".')
        scheme, rest = value.split('://')
        return scheme + '://' + rest.rstrip('/')

    @field_validator('request_url_style', mode='before')
    @classmethod
    def _default_url_style(cls, value):
        if value is None or value == '':
            return UrlStyle.PATH_STYLE
        return value

    @classmethod
    def from_dict(cls, conn_config: dict):
        """
        Builds the environment from a flat dict. The endpoint is taken from request_url when given, else assembled from protocol, host and port.

        Parameters
        ----------
        conn_config : dict
            Any of access_key_id, secret_access_key, host, port, protocol, zone, request_url, request_url_style, additional_user_agent.

        Returns
        -------
        EnvironmentContext
        """
        conf = {k: v for k, v in conn_config.items() if v is not None}

        protocol = conf.pop('protocol', default_protocol)
        host = conf.pop('host', default_host)
        port = conf.pop('port', default_port)
        if 'request_url' not in conf:
            conf['request_url'] = f'{protocol}://{host}:{port}'

        return cls(**conf)

    @classmethod
    def from_file(cls, path):
        """
        Loads the [connection_config] table of a toml file.
        """
        with open(path, 'rb') as f:
            conn_config = toml.load(f)['connection_config']

        return cls.from_dict(conn_config)

    @classmethod
    def from_env(cls, prefix: str='QINGSTOR_'):
        """
        Loads the config from environment variables such as QINGSTOR_ACCESS_KEY_ID and QINGSTOR_ZONE.
        """
        conn_config = {}
        for name in env_fields:
            value = os.environ.get(prefix + name.upper())
            if value is not None:
                conn_config[name] = value

        return cls.from_dict(conn_config)

    def with_access_key_id(self, access_key_id: str):
        """
        Returns a copy of the environment with a different access key id. The instance itself is never changed.
        """
        return self.model_copy(update={'access_key_id': access_key_id})


class OperationContext(BaseModel):
    """
    Describes one logical API call. Setting expires switches the build into presigned (query string) mode.
    """
    api_name: str
    request_method: str = 'GET'
    request_path: str = default_request_path
    bucket_name: Optional[str] = None
    object_name: Optional[str] = None
    zone: Optional[str] = None
    expires: Optional[int] = None

    @property
    def is_presigned(self):
        return self.expires is not None


@dataclass
class ParamSet:
    """
    The four classified parameter mappings of an operation. headers may hold a metadata sub-dict under the X-QS-MetaData key.
    """
    query: dict = field(default_factory=dict)
    body: dict = field(default_factory=dict)
    headers: dict = field(default_factory=dict)
    form_data: dict = field(default_factory=dict)
