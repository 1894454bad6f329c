import datetime
import urllib.parse
import pytest
from qsfunc import utils

################################################
### Tests


def test_ascii_encoding_object_key():
    assert utils.ascii_encoding('dir/obj name.png') == 'dir/obj%20name.png'
    assert utils.ascii_encoding('a=b:c') == 'a=b:c'
    assert utils.ascii_encoding(None) == ''


def test_ascii_encoding_reversible():
    value = 'données/文件 1.txt'
    encoded = utils.ascii_encoding(value)

    assert all(ord(c) <= 127 for c in encoded)
    assert urllib.parse.unquote(encoded) == value


@pytest.mark.parametrize('value', ['plain', 'with space', 'a+b/c?d', 'text/plain; charset=utf-8'])
def test_encode_header_params_ascii_unchanged(value):
    assert utils.encode_header_params({'X-Test': value}) == {'X-Test': value}


def test_encode_header_params_non_ascii():
    """

    """
    headers = utils.encode_header_params({'X-QS-Meta-Name': '报告 2024.pdf', 'X-QS-Meta-Size': 12})
    name = headers['X-QS-Meta-Name']

    assert name.isascii()
    assert urllib.parse.unquote_to_bytes(name) == '报告 2024.pdf'.encode('utf-8')
    assert headers['X-QS-Meta-Size'] == '12'


def test_get_header_case_insensitive():
    headers = {'content-type': 'text/plain'}

    assert utils.get_header(headers, 'Content-Type') == 'text/plain'
    assert utils.get_header(headers, 'Content-MD5') is None
    assert utils.get_header(headers, 'Content-MD5', '') == ''


def test_http_date():
    dt = datetime.datetime.fromtimestamp(1700000000, datetime.timezone.utc)

    assert utils.http_date(dt) == 'Tue, 14 Nov 2023 22:13:20 GMT'


def test_generate_url():
    url = utils.generate_url({'prefix': 'a b', 'limit': 10, 'delimiter': '/'}, 'https://qingstor.com/bucket')

    assert url == 'https://qingstor.com/bucket?delimiter=%2F&limit=10&prefix=a%20b'


def test_generate_url_existing_query_and_bare_key():
    assert utils.generate_url({'uploads': ''}, 'https://qingstor.com/b/o?acl') == 'https://qingstor.com/b/o?acl&uploads'
    assert utils.generate_url({}, 'https://qingstor.com/b') == 'https://qingstor.com/b'


def test_first_query_values():
    assert utils.first_query_values('a=1&b=2&a=3') == {'a': '1', 'b': '2'}
    assert utils.first_query_values('uploads&prefix=a%20b') == {'uploads': '', 'prefix': 'a b'}
    assert utils.first_query_values(None) == {}


def test_is_empty():
    assert utils.is_empty(None)
    assert utils.is_empty('')
    assert not utils.is_empty('null')
    assert not utils.is_empty('QS ak:sig')
    assert not utils.is_empty(0)


def test_ascii_encoding_star_and_tilde():
    assert utils.ascii_encoding('a*b~c.d-e_f') == 'a*b%7Ec.d-e_f'
    assert utils.ascii_encoding('null') == 'null'


def test_generate_url_null_value():
    url = utils.generate_url({'prefix': 'null', 'marker': 'NULL'}, 'https://qingstor.com/b')

    assert url == 'https://qingstor.com/b?marker=NULL&prefix=null'
    assert utils.first_query_values(url.split('?')[1]) == {'marker': 'NULL', 'prefix': 'null'}
