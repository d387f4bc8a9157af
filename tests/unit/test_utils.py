"""Tests for secretstack.utils."""

import pytest

from secretstack.utils import (
    censor_secret_payload, decode_value, encode_value, get_at_path, is_valid_secret_name,
    mask_value, parse_path, set_at_path
)


@pytest.mark.parametrize("name,expected", [
    ("DB_PASS", True),
    ("_private", True),
    ("api_key2", True),
    ("2FA", False),
    ("db-pass", False),
    ("", False),
])
def test_is_valid_secret_name(name, expected):
    assert is_valid_secret_name(name) is expected


def test_mask_value():
    assert mask_value("hunter2") == "hunt***"
    assert mask_value("abc") == "****"
    assert mask_value(12345678, length=2) == "12******"
    with pytest.raises(ValueError):
        mask_value("x", length=-1)


def test_encode_decode():
    assert encode_value("hunter2") == "aHVudGVyMg=="
    assert decode_value("aHVudGVyMg==") == "hunter2"


def test_censor_secret_payload_leaves_input_untouched():
    manifest = {'kind': 'Secret', 'data': {'A': 'YQ=='}, 'stringData': {'B': 'b'}}
    censored = censor_secret_payload(manifest)
    assert censored == {'kind': 'Secret', 'data': {'A': '***'}, 'stringData': {'B': '***'}}
    assert manifest['data'] == {'A': 'YQ=='}


class TestPaths:

    def test_parse_path(self):
        assert parse_path('spec.template.spec.containers[2].env') == [
            'spec', 'template', 'spec', 'containers', 2, 'env'
        ]
        with pytest.raises(ValueError):
            parse_path('')

    def test_get_at_path(self):
        resource = {'spec': {'containers': [{'name': 'web'}]}}
        assert get_at_path(resource, 'spec.containers[0].name') == 'web'
        assert get_at_path(resource, 'spec.containers[3].name', 'none') == 'none'

    def test_set_at_path_creates_intermediate_nodes(self):
        resource = {}
        set_at_path(resource, 'spec.template.spec.imagePullSecrets', [{'name': 'registry'}])
        assert resource == {'spec': {'template': {'spec': {'imagePullSecrets': [{'name': 'registry'}]}}}}

    def test_set_at_path_extends_existing_list(self):
        resource = {'spec': {'containers': [{'name': 'web', 'env': [{'name': 'MODE', 'value': 'prod'}]}]}}
        set_at_path(resource, 'spec.containers[0].env', [{'name': 'DB_PASS'}])
        assert [entry['name'] for entry in resource['spec']['containers'][0]['env']] == ['MODE', 'DB_PASS']

    def test_set_at_path_pads_lists(self):
        resource = {'spec': {'containers': [{'name': 'web'}]}}
        set_at_path(resource, 'spec.containers[1].env', [])
        assert resource['spec']['containers'][1] == {'env': []}
