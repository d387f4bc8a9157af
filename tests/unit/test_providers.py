"""Tests for providers: target paths, payloads, prepare and merge handlers."""

import json
import unittest

import pytest

from secretstack.exceptions import (
    InvalidSecretValueError, KeyNotAllowedError, MergeConflictError,
    ProviderValidationError, UnsupportedStrategyError
)
from secretstack.models import ConflictStrategy, EffectKind, SecretInjection, parse_strategy
from secretstack.providers import (
    BasicAuthSecretProvider, CustomTypeSecretProvider, DockerConfigSecretProvider,
    InMemoryProvider, OpaqueSecretProvider, SshAuthSecretProvider, TlsSecretProvider
)
from secretstack.utils import decode_value


def injection(secret_name, strategy='env', target_name=None, **options):
    return SecretInjection(
        secret_name=secret_name,
        target_name=target_name or secret_name,
        resource_id='app',
        strategy=parse_strategy(strategy, **options),
        provider_id='0.provider',
        path='spec.template.spec.containers[0].env',
    )


class TestTargetPath:

    def test_env_defaults_to_first_container(self):
        provider = OpaqueSecretProvider('app-secret')
        assert provider.get_target_path(parse_strategy('env')) == 'spec.template.spec.containers[0].env'

    def test_env_with_container_index(self):
        provider = OpaqueSecretProvider('app-secret')
        path = provider.get_target_path(parse_strategy('env', container_index=2))
        assert path == 'spec.template.spec.containers[2].env'

    def test_explicit_target_path_wins(self):
        provider = BasicAuthSecretProvider('creds')
        path = provider.get_target_path({'kind': 'envFrom', 'container_index': 3, 'target_path': 'spec.x'})
        assert path == 'spec.x'

    def test_env_from_path(self):
        provider = TlsSecretProvider('tls')
        path = provider.get_target_path(parse_strategy('envFrom', container_index=1))
        assert path == 'spec.template.spec.containers[1].envFrom'

    def test_image_pull_secret_path(self):
        provider = DockerConfigSecretProvider('registry')
        assert provider.get_target_path('imagePullSecret') == 'spec.template.spec.imagePullSecrets'

    def test_unsupported_strategy(self):
        provider = OpaqueSecretProvider('app-secret')
        with pytest.raises(UnsupportedStrategyError) as exc_info:
            provider.get_target_path(parse_strategy('volume', mount_path='/etc/secret'))
        assert exc_info.value.kind == 'volume'
        assert exc_info.value.supported == ['env']


class TestOpaqueSecretProvider(unittest.TestCase):

    def setUp(self):
        self.provider = OpaqueSecretProvider('app-secret')
        self.provider.name = 'opaque'

    def test_prepare_builds_secret_manifest(self):
        effects = self.provider.prepare('DB_PASS', 's3cr3t')

        self.assertEqual(len(effects), 1)
        effect = effects[0]
        self.assertEqual(effect.kind, EffectKind.KUBECTL)
        self.assertEqual(effect.provider_name, 'opaque')
        self.assertEqual(effect.value['kind'], 'Secret')
        self.assertEqual(effect.value['type'], 'Opaque')
        self.assertEqual(effect.value['metadata'], {'name': 'app-secret', 'namespace': 'default'})
        self.assertEqual(str(effect.target_identity), 'Secret:default/app-secret')

    def test_prepare_round_trip(self):
        value = 'pä$$w0rd with spaces'
        effect = self.provider.prepare('DB_PASS', value)[0]
        self.assertEqual(decode_value(effect.value['data']['DB_PASS']), value)

    def test_prepare_rejects_structured_values(self):
        with self.assertRaises(InvalidSecretValueError):
            self.provider.prepare('DB_PASS', {'a': 'b'})

    def test_payload_references_secret_key(self):
        payload = self.provider.get_injection_payload([
            injection('DB_PASS'),
            injection('API_KEY', target_name='APP_API_KEY'),
        ])
        self.assertEqual(payload, [
            {'name': 'DB_PASS', 'valueFrom': {'secretKeyRef': {'name': 'app-secret', 'key': 'DB_PASS'}}},
            {'name': 'APP_API_KEY', 'valueFrom': {'secretKeyRef': {'name': 'app-secret', 'key': 'API_KEY'}}},
        ])

    def test_payload_never_contains_values(self):
        self.provider.prepare('DB_PASS', 'hunter2')
        payload = self.provider.get_injection_payload([injection('DB_PASS')])
        self.assertNotIn('hunter2', json.dumps(payload))

    def test_empty_name_rejected(self):
        with self.assertRaises(ProviderValidationError):
            OpaqueSecretProvider('')


class TestCustomTypeSecretProvider(unittest.TestCase):

    def setUp(self):
        self.provider = CustomTypeSecretProvider(
            'api-creds', namespace='prod', secret_type='vendor.com/api',
            allowed_keys=['api_key', 'endpoint']
        )

    def test_requires_secret_type(self):
        with self.assertRaises(ProviderValidationError):
            CustomTypeSecretProvider('api-creds', secret_type='  ')

    def test_prepare_encodes_every_key(self):
        effect = self.provider.prepare('API', {'api_key': 'k', 'endpoint': 'https://x'})[0]
        self.assertEqual(effect.value['type'], 'vendor.com/api')
        self.assertEqual(effect.value['metadata']['namespace'], 'prod')
        self.assertEqual(decode_value(effect.value['data']['endpoint']), 'https://x')

    def test_prepare_rejects_disallowed_keys(self):
        with self.assertRaises(KeyNotAllowedError) as ctx:
            self.provider.prepare('API', {'api_key': 'k', 'debug': 'true'})
        self.assertEqual(ctx.exception.keys, ['debug'])
        self.assertIn('api_key', ctx.exception.guidance)

    def test_prepare_rejects_non_mapping(self):
        with self.assertRaises(InvalidSecretValueError):
            self.provider.prepare('API', 'not-a-mapping')

    def test_env_payload_requires_allowed_key(self):
        payload = self.provider.get_injection_payload([injection('API', target_name='API_KEY', key='api_key')])
        self.assertEqual(payload[0]['valueFrom']['secretKeyRef'], {'name': 'api-creds', 'key': 'api_key'})

        with self.assertRaises(KeyNotAllowedError):
            self.provider.get_injection_payload([injection('API', key='other')])
        with self.assertRaises(ProviderValidationError):
            self.provider.get_injection_payload([injection('API')])

    def test_env_from_payload_with_prefix(self):
        payload = self.provider.get_injection_payload([injection('API', 'envFrom', prefix='API_')])
        self.assertEqual(payload, [{'prefix': 'API_', 'secretRef': {'name': 'api-creds'}}])

    def test_env_from_mixed_prefixes_rejected(self):
        with self.assertRaises(ProviderValidationError):
            self.provider.get_injection_payload([
                injection('API', 'envFrom', prefix='A_'),
                injection('OTHER', 'envFrom', prefix='B_'),
            ])

    def test_mixed_strategies_rejected(self):
        with self.assertRaises(ProviderValidationError):
            self.provider.get_injection_payload([
                injection('API', 'env', key='api_key'),
                injection('API', 'envFrom'),
            ])


class TestBasicAuthAndTls:

    def test_basic_auth_prepare(self):
        effect = BasicAuthSecretProvider('creds').prepare('BASIC', {'username': 'admin', 'password': 'pw'})[0]
        assert effect.value['type'] == 'kubernetes.io/basic-auth'
        assert decode_value(effect.value['data']['username']) == 'admin'
        assert decode_value(effect.value['data']['password']) == 'pw'

    def test_basic_auth_rejects_incomplete_value(self):
        with pytest.raises(InvalidSecretValueError):
            BasicAuthSecretProvider('creds').prepare('BASIC', {'username': 'admin'})

    def test_basic_auth_env_key_must_be_username_or_password(self):
        provider = BasicAuthSecretProvider('creds')
        with pytest.raises(KeyNotAllowedError):
            provider.get_injection_payload([injection('BASIC', key='token')])
        payload = provider.get_injection_payload([injection('BASIC', target_name='DB_USER', key='username')])
        assert payload[0] == {'name': 'DB_USER', 'valueFrom': {'secretKeyRef': {'name': 'creds', 'key': 'username'}}}

    def test_tls_prepare_maps_keys(self):
        effect = TlsSecretProvider('tls').prepare('TLS', {'cert': 'CERT', 'key': 'KEY'})[0]
        assert effect.value['type'] == 'kubernetes.io/tls'
        assert decode_value(effect.value['data']['tls.crt']) == 'CERT'
        assert decode_value(effect.value['data']['tls.key']) == 'KEY'

    def test_tls_rejects_empty_cert(self):
        with pytest.raises(InvalidSecretValueError):
            TlsSecretProvider('tls').prepare('TLS', {'cert': '', 'key': 'KEY'})


class TestSshAuthSecretProvider:

    def test_prepare_with_known_hosts(self):
        provider = SshAuthSecretProvider('git-ssh', namespace='ci')
        effect = provider.prepare('GIT_SSH', {'ssh-privatekey': 'PRIVATE', 'known_hosts': 'github.com ssh-ed25519 AAAA'})[0]
        assert effect.value['type'] == 'kubernetes.io/ssh-auth'
        assert effect.value['metadata'] == {'name': 'git-ssh', 'namespace': 'ci'}
        assert decode_value(effect.value['data']['ssh-privatekey']) == 'PRIVATE'
        assert decode_value(effect.value['data']['known_hosts']) == 'github.com ssh-ed25519 AAAA'

    def test_known_hosts_is_optional(self):
        effect = SshAuthSecretProvider('git-ssh').prepare('GIT_SSH', {'ssh-privatekey': 'PRIVATE'})[0]
        assert list(effect.value['data']) == ['ssh-privatekey']

    @pytest.mark.parametrize("value", [{}, {'ssh-privatekey': ''}, {'known_hosts': 'x'}, 'PRIVATE'])
    def test_rejects_invalid_values(self, value):
        with pytest.raises(InvalidSecretValueError):
            SshAuthSecretProvider('git-ssh').prepare('GIT_SSH', value)

    def test_env_and_env_from_payloads(self):
        provider = SshAuthSecretProvider('git-ssh')
        env = provider.get_injection_payload([injection('GIT_SSH', target_name='SSH_KEY', key='ssh-privatekey')])
        assert env == [{'name': 'SSH_KEY', 'valueFrom': {'secretKeyRef': {'name': 'git-ssh', 'key': 'ssh-privatekey'}}}]
        with pytest.raises(KeyNotAllowedError):
            provider.get_injection_payload([injection('GIT_SSH', key='id_rsa')])
        env_from = provider.get_injection_payload([injection('GIT_SSH', 'envFrom', prefix='GIT_')])
        assert env_from == [{'prefix': 'GIT_', 'secretRef': {'name': 'git-ssh'}}]

    def test_allows_merge(self):
        assert SshAuthSecretProvider.allow_merge is True


class TestDockerConfigSecretProvider:

    def test_prepare_builds_dockerconfigjson(self):
        provider = DockerConfigSecretProvider('registry', namespace='ci')
        effect = provider.prepare('REGISTRY', {'username': 'bot', 'password': 'pw', 'registry': 'ghcr.io'})[0]

        assert effect.value['type'] == 'kubernetes.io/dockerconfigjson'
        config = json.loads(decode_value(effect.value['data']['.dockerconfigjson']))
        auth = config['auths']['ghcr.io']
        assert auth['username'] == 'bot'
        assert decode_value(auth['auth']) == 'bot:pw'

    def test_payload_names_secret(self):
        provider = DockerConfigSecretProvider('registry')
        assert provider.get_injection_payload([injection('REGISTRY', 'imagePullSecret')]) == [{'name': 'registry'}]

    def test_does_not_allow_merge(self):
        assert DockerConfigSecretProvider('registry').allow_merge is False


class TestKubernetesMerge(unittest.TestCase):

    def setUp(self):
        self.provider = OpaqueSecretProvider('app-secret')
        self.provider.name = 'opaque'

    def test_disjoint_keys_are_unioned(self):
        effects = self.provider.prepare('DB_PASS', 'a') + self.provider.prepare('API_KEY', 'b')
        merged = self.provider.merge_effects(effects)
        self.assertEqual(len(merged), 1)
        self.assertEqual(set(merged[0].value['data']), {'DB_PASS', 'API_KEY'})

    def test_overlapping_key_conflicts(self):
        effects = self.provider.prepare('DB_PASS', 'a') + self.provider.prepare('DB_PASS', 'b')
        with self.assertRaises(MergeConflictError) as ctx:
            self.provider.merge_effects(effects)
        message = str(ctx.exception)
        self.assertIn('"DB_PASS"', message)
        self.assertIn('"app-secret"', message)
        self.assertIn('"default"', message)

    def test_overwrite_keeps_later_value(self):
        effects = self.provider.prepare('DB_PASS', 'a') + self.provider.prepare('DB_PASS', 'b')
        with self.assertLogs('secretstack.providers.merge', level='WARNING'):
            merged = self.provider.merge_effects(effects, ConflictStrategy.OVERWRITE)
        self.assertEqual(decode_value(merged[0].value['data']['DB_PASS']), 'b')

    def test_different_namespaces_are_not_merged(self):
        other = OpaqueSecretProvider('app-secret', namespace='prod')
        effects = self.provider.prepare('DB_PASS', 'a') + other.prepare('DB_PASS', 'b')
        self.assertEqual(len(self.provider.merge_effects(effects)), 2)

    def test_merge_does_not_mutate_inputs(self):
        effects = self.provider.prepare('DB_PASS', 'a') + self.provider.prepare('API_KEY', 'b')
        self.provider.merge_effects(effects)
        self.assertEqual(list(effects[0].value['data']), ['DB_PASS'])


class TestInMemoryProvider:

    def test_prepare_custom_effect(self):
        provider = InMemoryProvider('store')
        effect = provider.prepare('DB_PASS', 'hunter2')[0]
        assert effect.kind == EffectKind.CUSTOM
        assert effect.value == {'storeName': 'store', 'rawData': {'DB_PASS': 'hunter2'}}

    def test_merge_raw_data(self):
        provider = InMemoryProvider('store')
        merged = provider.merge_effects(provider.prepare('A', '1') + provider.prepare('B', '2'))
        assert merged[0].value['rawData'] == {'A': '1', 'B': '2'}

    def test_payload(self):
        payload = InMemoryProvider('store').get_injection_payload([injection('DB_PASS')])
        assert payload == [{'name': 'DB_PASS', 'valueFrom': {'secretKeyRef': {'name': 'store', 'key': 'DB_PASS'}}}]
