import pytest
from pydantic import ValidationError
from qsfunc.config import EnvironmentContext, OperationContext, ParamSet, UrlStyle

################################################
### Tests


def test_defaults():
    env = EnvironmentContext(access_key_id='ak', secret_access_key='sk')

    assert env.request_url == 'https://qingstor.com:443'
    assert env.request_url_style is UrlStyle.PATH_STYLE
    assert env.zone is None
    assert env.additional_user_agent is None


def test_request_url_validation():
    with pytest.raises(ValidationError):
        EnvironmentContext(access_key_id='ak', secret_access_key='sk', request_url='qingstor.com')

    with pytest.raises(ValidationError):
        EnvironmentContext(access_key_id='ak', secret_access_key='sk', request_url='https://a://b')

    env = EnvironmentContext(access_key_id='ak', secret_access_key='sk', request_url='http://localhost:9000/')
    assert env.request_url == 'http://localhost:9000'


def test_url_style_values():
    env = EnvironmentContext(access_key_id='ak', secret_access_key='sk', request_url_style='virtual_host_style')
    assert env.request_url_style is UrlStyle.VIRTUAL_HOST_STYLE

    env = EnvironmentContext(access_key_id='ak', secret_access_key='sk', request_url_style=None)
    assert env.request_url_style is UrlStyle.PATH_STYLE


def test_env_is_frozen():
    env = EnvironmentContext(access_key_id='ak', secret_access_key='sk')

    with pytest.raises(ValidationError):
        env.access_key_id = 'other'

    other = env.with_access_key_id('other')
    assert other.access_key_id == 'other'
    assert env.access_key_id == 'ak'


def test_from_dict():
    env = EnvironmentContext.from_dict({'access_key_id': 'ak', 'secret_access_key': 'sk', 'host': 'example.com', 'port': 8080, 'protocol': 'http', 'zone': 'pek3a', 'additional_user_agent': None})

    assert env.request_url == 'http://example.com:8080'
    assert env.zone == 'pek3a'


def test_from_file(tmp_path):
    config_path = tmp_path.joinpath('qs_config.toml')
    config_path.write_text('[connection_config]\naccess_key_id = "ak"\nsecret_access_key = "sk"\nzone = "sh1a"\nrequest_url_style = "virtual_host_style"\n')

    env = EnvironmentContext.from_file(config_path)

    assert env.access_key_id == 'ak'
    assert env.zone == 'sh1a'
    assert env.request_url == 'https://qingstor.com:443'
    assert env.request_url_style is UrlStyle.VIRTUAL_HOST_STYLE


def test_from_env(monkeypatch):
    monkeypatch.setenv('QINGSTOR_ACCESS_KEY_ID', 'ak')
    monkeypatch.setenv('QINGSTOR_SECRET_ACCESS_KEY', 'sk')
    monkeypatch.setenv('QINGSTOR_REQUEST_URL', 'http://localhost:9000')
    monkeypatch.setenv('QINGSTOR_ZONE', 'test')

    env = EnvironmentContext.from_env()

    assert env.request_url == 'http://localhost:9000'
    assert env.zone == 'test'
    assert env.secret_access_key == 'sk'


def test_operation_context():
    op = OperationContext(api_name='Get Object')

    assert op.request_method == 'GET'
    assert op.request_path == '/<bucket-name>/<object-key>'
    assert not op.is_presigned
    assert OperationContext(api_name='Get Object', expires=1700000000).is_presigned


def test_param_set_defaults_are_independent():
    a = ParamSet()
    b = ParamSet()
    a.query['x'] = '1'

    assert b.query == {}
