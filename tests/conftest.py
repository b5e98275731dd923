"""
Pytest configuration and fixtures for provisioner tests.
"""
import copy
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'

from kubernetes.client.rest import ApiException

from provisioner.app import create_app
from provisioner.config import InstanceSettings
from provisioner.instance_manager import InstanceManager


TENANT_ID = '3f2504e0-4f89-41d3-9a0c-0305e82c3301'
OTHER_TENANT_ID = '6ba7b810-9dad-11d1-80b4-00c04fd430c8'


class FakeCustomObjectsApi:
    """
    In-memory stand-in for kubernetes.client.CustomObjectsApi.

    Supports the namespaced create/list/delete calls the manager makes,
    equality label selectors, and 404/409 ApiExceptions like the API server.
    """

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_on = {}
        self._counter = 0

    def _key(self, namespace, name):
        return (namespace, name)

    def _maybe_fail(self, method):
        self.calls.append(method)
        error = self.fail_on.get(method)
        if error is not None:
            raise error

    def create_namespaced_custom_object(self, group, version, namespace, plural, body, **kwargs):
        self._maybe_fail('create')
        name = body['metadata']['name']
        if self._key(namespace, name) in self.objects:
            raise ApiException(status=409, reason='AlreadyExists')

        stored = copy.deepcopy(body)
        self._counter += 1
        stored['metadata']['creationTimestamp'] = f'2024-01-01T00:00:{self._counter:02d}Z'
        self.objects[self._key(namespace, name)] = stored
        return copy.deepcopy(stored)

    def list_namespaced_custom_object(self, group, version, namespace, plural, label_selector=None, **kwargs):
        self._maybe_fail('list')
        wanted = {}
        if label_selector:
            for term in label_selector.split(','):
                k, v = term.split('=', 1)
                wanted[k] = v

        items = []
        for (ns, _), obj in self.objects.items():
            labels = obj['metadata'].get('labels', {})
            if ns == namespace and all(labels.get(k) == v for k, v in wanted.items()):
                items.append(copy.deepcopy(obj))
        return {'apiVersion': f'{group}/{version}', 'kind': 'List', 'items': items}

    def delete_namespaced_custom_object(self, group, version, namespace, plural, name, **kwargs):
        self._maybe_fail('delete')
        if self.objects.pop(self._key(namespace, name), None) is None:
            raise ApiException(status=404, reason='NotFound')
        return {'status': 'Success'}

    # Test helpers

    def set_phase(self, name, phase, namespace='tenants-test'):
        self.objects[self._key(namespace, name)]['status'] = {'phase': phase}

    def names(self):
        return sorted(name for _, name in self.objects)


@pytest.fixture
def settings():
    return InstanceSettings(
        namespace='tenants-test',
        domain='example.test',
        internal_domain='internal.example.test',
    )


@pytest.fixture
def fake_api():
    return FakeCustomObjectsApi()


@pytest.fixture
def manager(fake_api, settings):
    return InstanceManager(fake_api, settings)


@pytest.fixture
def app(manager):
    """Create application for testing."""
    return create_app('testing', manager=manager)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def tenant_id():
    return TENANT_ID
