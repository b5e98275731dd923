"""
Instance Manager for provisioning tenant OpenClaw instances.

Declares OpenClawInstance custom resources through the Kubernetes
custom objects API. The cluster is the only store: instances are found
again by their ``tenant`` label and nothing is cached locally.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .config import InstanceSettings
from .errors import StoreError, UnsupportedOperation
from .instance_spec import (
    CRD_GROUP,
    CRD_PLURAL,
    CRD_VERSION,
    GATEWAY_TOKEN_ENV,
    build_instance_resource,
    env_value,
    tenant_selector,
)
from .kube_credentials import default_sources, resolve_api_client
from .naming import (
    generate_gateway_token,
    generate_instance_name,
    instance_url,
    validate_tenant_id,
)
from .status import InstanceStatus, phase_of, project_phase

logger = logging.getLogger(__name__)

STORE_ERRORS = (ApiException, HTTPError, OSError)


@dataclass
class InstanceInfo:
    name: str
    endpoint: str
    status: InstanceStatus
    gateway_token: str = ""

    def to_dict(self, include_token: bool = True) -> dict:
        data = {
            'name': self.name,
            'endpoint': self.endpoint,
            'status': self.status.value,
        }
        if include_token and self.gateway_token:
            data['gateway_token'] = self.gateway_token
        return data


class _Deadline:
    """Splits one request's time budget across its store round trips."""

    def __init__(self, budget: float, clock: Callable[[], float]):
        self._clock = clock
        self._expires = clock() + budget

    def timeout(self, operation: str, per_call: float) -> float:
        remaining = self._expires - self._clock()
        if remaining <= 0:
            raise StoreError(operation, "request deadline exceeded")
        return min(per_call, remaining)


def _creation_order(item: dict):
    metadata = item.get('metadata') or {}
    created = metadata.get('creationTimestamp')
    return (created is None, str(created or ''), metadata.get('name') or '')


class InstanceManager:
    """Manages OpenClawInstance resources for tenants in a single namespace."""

    def __init__(
        self,
        api: client.CustomObjectsApi,
        settings: InstanceSettings,
        clock: Callable[[], float] = time.monotonic
    ):
        self.api = api
        self.settings = settings
        self._clock = clock

    @classmethod
    def from_config(cls, cfg: Mapping) -> "InstanceManager":
        """Resolve cluster credentials and build a manager. Fails fast on bad config."""
        settings = InstanceSettings.from_config(cfg)
        api_client = resolve_api_client(default_sources(cfg))
        return cls(client.CustomObjectsApi(api_client), settings)

    def _deadline(self) -> _Deadline:
        return _Deadline(self.settings.request_timeout, self._clock)

    def instance_url(self, instance_name: str) -> str:
        return instance_url(instance_name, self.settings.domain)

    # ==================== Store calls ====================

    def _list(self, tenant_id: str, deadline: _Deadline) -> List[dict]:
        operation = "listing instances"
        try:
            result = self.api.list_namespaced_custom_object(
                CRD_GROUP,
                CRD_VERSION,
                self.settings.namespace,
                CRD_PLURAL,
                label_selector=tenant_selector(tenant_id),
                _request_timeout=deadline.timeout(operation, self.settings.store_timeout)
            )
        except STORE_ERRORS as e:
            raise StoreError(operation, str(e), e) from e

        items = result.get('items', []) if isinstance(result, dict) else []
        items = [item for item in items if isinstance(item, dict)]
        return sorted(items, key=_creation_order)

    def _delete(self, name: str, deadline: _Deadline) -> None:
        operation = f"deleting tenant instance {name}"
        try:
            self.api.delete_namespaced_custom_object(
                CRD_GROUP,
                CRD_VERSION,
                self.settings.namespace,
                CRD_PLURAL,
                name,
                _request_timeout=deadline.timeout(operation, self.settings.store_timeout)
            )
        except ApiException as e:
            if e.status == 404:
                logger.info(f"Instance already gone: {name}")
                return
            raise StoreError(operation, str(e), e) from e
        except STORE_ERRORS as e:
            raise StoreError(operation, str(e), e) from e

    def _project(self, item: dict) -> InstanceInfo:
        name = (item.get('metadata') or {}).get('name', '')
        return InstanceInfo(
            name=name,
            endpoint=self.instance_url(name),
            status=project_phase(phase_of(item)),
            gateway_token=env_value(item, GATEWAY_TOKEN_ENV) or "",
        )

    # ==================== Lifecycle ====================

    def create_instance(self, tenant_id: str, gateway_token: Optional[str] = None) -> InstanceInfo:
        """
        Declare a new instance for a tenant.

        Does not look for an existing instance first; two creates for the
        same tenant produce two resources.
        """
        validate_tenant_id(tenant_id)
        deadline = self._deadline()

        instance_name = generate_instance_name()
        if not gateway_token or not gateway_token.strip():
            gateway_token = generate_gateway_token()

        resource = build_instance_resource(tenant_id, instance_name, gateway_token, self.settings)

        operation = "creating tenant instance"
        try:
            self.api.create_namespaced_custom_object(
                CRD_GROUP,
                CRD_VERSION,
                self.settings.namespace,
                CRD_PLURAL,
                resource.to_dict(),
                _request_timeout=deadline.timeout(operation, self.settings.store_timeout)
            )
        except STORE_ERRORS as e:
            raise StoreError(operation, str(e), e) from e

        logger.info(f"Created instance {instance_name} for tenant {tenant_id}")

        return InstanceInfo(
            name=instance_name,
            endpoint=self.instance_url(instance_name),
            status=InstanceStatus.STARTING,
            gateway_token=gateway_token,
        )

    def list_instances(self, tenant_id: str) -> List[InstanceInfo]:
        """All instances of a tenant, oldest first."""
        validate_tenant_id(tenant_id)
        return [self._project(item) for item in self._list(tenant_id, self._deadline())]

    def get_instance(self, tenant_id: str) -> Optional[InstanceInfo]:
        """The tenant's oldest instance, or None if it has none."""
        instances = self.list_instances(tenant_id)
        if not instances:
            return None

        if len(instances) > 1:
            logger.warning(
                f"Tenant {tenant_id} has {len(instances)} instances, "
                f"using oldest: {instances[0].name}"
            )
        return instances[0]

    def delete_instance(self, tenant_id: str) -> None:
        """
        Delete every instance of a tenant.

        Missing resources count as deleted. The first other failure aborts
        and is raised; instances deleted before it stay deleted.
        """
        validate_tenant_id(tenant_id)
        deadline = self._deadline()

        for item in self._list(tenant_id, deadline):
            name = (item.get('metadata') or {}).get('name', '')
            self._delete(name, deadline)
            logger.info(f"Deleted instance {name} for tenant {tenant_id}")

    def stop_instance(self, tenant_id: str) -> None:
        # The operator cannot scale to zero, so stopping is deleting.
        self.delete_instance(tenant_id)

    def start_instance(self, tenant_id: str) -> None:
        validate_tenant_id(tenant_id)
        raise UnsupportedOperation("StartInstance", "use CreateInstance instead")
