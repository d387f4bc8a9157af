"""Tests for SecretManager and SecretRegistry."""

import unittest

import pytest

from secretstack.connectors import EnvConnector, InMemoryConnector
from secretstack.exceptions import (
    ConfigError, DuplicateRegistrationError, DuplicateSecretError,
    UnknownRegistrationError, UnresolvedDefaultError
)
from secretstack.manager import SecretManager
from secretstack.models import ResolvedSecret, SecretEntry
from secretstack.providers import InMemoryProvider, OpaqueSecretProvider
from secretstack.registry import SecretRegistry


class TestSecretManager(unittest.TestCase):

    def setUp(self):
        self.manager = (SecretManager()
                        .add_connector('env', EnvConnector())
                        .add_connector('memory', InMemoryConnector())
                        .add_provider('opaque', OpaqueSecretProvider('app-secret'))
                        .add_provider('store', InMemoryProvider()))

    def test_default_provider_applies_to_entries_without_provider(self):
        self.manager.set_default_connector('env').set_default_provider('store')
        self.manager.add_secret('DB_PASS')
        self.assertEqual(
            self.manager.get_secrets()['DB_PASS'],
            ResolvedSecret(name='DB_PASS', connector='env', provider='store')
        )

    def test_explicit_names_override_defaults(self):
        self.manager.set_default_connector('env').set_default_provider('store')
        self.manager.add_secret('API_KEY', connector='memory', provider='opaque')
        entry = self.manager.get_secrets()['API_KEY']
        self.assertEqual((entry.connector, entry.provider), ('memory', 'opaque'))

    def test_duplicate_secret_fails_regardless_of_bindings(self):
        self.manager.add_secret('DB_PASS', connector='env', provider='opaque')
        with self.assertRaises(DuplicateSecretError):
            self.manager.add_secret('DB_PASS', connector='memory', provider='store')

    def test_secret_names_are_case_sensitive(self):
        self.manager.add_secret('db_pass', connector='env', provider='opaque')
        self.manager.add_secret('DB_PASS', connector='env', provider='opaque')
        self.assertEqual(list(self.manager.get_secrets()), ['db_pass', 'DB_PASS'])

    def test_missing_default_fails(self):
        with self.assertRaises(UnresolvedDefaultError):
            self.manager.add_secret('DB_PASS', connector='env')
        with self.assertRaises(UnresolvedDefaultError):
            self.manager.add_secret('DB_PASS', provider='opaque')

    def test_default_must_be_registered_first(self):
        with self.assertRaises(UnknownRegistrationError):
            SecretManager().set_default_connector('env')
        with self.assertRaises(UnknownRegistrationError):
            SecretManager().set_default_provider('opaque')

    def test_unknown_explicit_reference_fails(self):
        with self.assertRaises(UnknownRegistrationError):
            self.manager.add_secret('DB_PASS', connector='vault', provider='opaque')

    def test_duplicate_registrations_fail(self):
        with self.assertRaises(DuplicateRegistrationError):
            self.manager.add_connector('env', EnvConnector())
        with self.assertRaises(DuplicateRegistrationError):
            self.manager.add_provider('opaque', OpaqueSecretProvider('other'))

    def test_add_provider_assigns_name(self):
        self.assertEqual(self.manager.resolve_provider('opaque').name, 'opaque')

    def test_add_secret_accepts_entry_objects(self):
        self.manager.add_secret(SecretEntry(name='A', connector='env', provider='opaque'))
        self.manager.add_secret({'name': 'B', 'connector': 'memory', 'provider': 'store'})
        self.assertEqual(list(self.manager.get_secrets()), ['A', 'B'])

    def test_resolve_unknown_names(self):
        with self.assertRaises(UnknownRegistrationError):
            self.manager.resolve_connector('vault')
        with self.assertRaises(UnknownRegistrationError):
            self.manager.resolve_provider('vault')

    def test_resolve_provider_for(self):
        self.manager.add_secret('DB_PASS', connector='env', provider='opaque')
        provider, name = self.manager.resolve_provider_for('DB_PASS')
        self.assertEqual(name, 'opaque')
        self.assertIsInstance(provider, OpaqueSecretProvider)
        with self.assertRaises(UnknownRegistrationError):
            self.manager.resolve_provider_for('NOPE')


def test_single_registration_is_implicit_default():
    manager = (SecretManager()
               .add_connector('memory', InMemoryConnector())
               .add_provider('opaque', OpaqueSecretProvider('app-secret'))
               .add_secret('DB_PASS'))
    assert manager.get_default_connector() == 'memory'
    assert manager.get_default_provider() == 'opaque'
    assert manager.get_secrets()['DB_PASS'].provider == 'opaque'


def test_config_errors_share_base_class():
    manager = SecretManager()
    with pytest.raises(ConfigError):
        manager.add_secret('DB_PASS')


class TestSecretRegistry:

    def test_add_get_list_in_order(self):
        first, second = SecretManager(), SecretManager()
        registry = SecretRegistry().add('frontend', first).add('backend', second)
        assert registry.get('backend') is second
        assert list(registry.list()) == ['frontend', 'backend']

    def test_duplicate_name(self):
        registry = SecretRegistry().add('frontend', SecretManager())
        with pytest.raises(DuplicateRegistrationError):
            registry.add('frontend', SecretManager())

    def test_unknown_name(self):
        with pytest.raises(UnknownRegistrationError):
            SecretRegistry().get('nope')
