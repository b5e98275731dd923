"""
Cluster credential resolution.

Sources are tried in order; the first one able to produce an ApiClient wins:

1. KUBECONFIG_BASE64 - a base64 encoded kubeconfig (App Platform style deploys)
2. In-cluster service account
3. A kubeconfig file on disk (local development)
"""
import base64
import binascii
import logging
import os
from typing import Iterable, List, Mapping, Optional

import yaml
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from .errors import ConfigurationError, CredentialsUnavailable

logger = logging.getLogger(__name__)

DEFAULT_KUBECONFIG_PATH = os.path.join(os.path.expanduser('~'), '.kube', 'config')


class CredentialSource:
    name = 'base'

    def resolve(self) -> client.ApiClient:
        raise NotImplementedError


class KubeconfigBase64Source(CredentialSource):
    name = 'kubeconfig-base64'

    def __init__(self, encoded: Optional[str]):
        self.encoded = encoded

    def resolve(self) -> client.ApiClient:
        if not self.encoded:
            raise CredentialsUnavailable("KUBECONFIG_BASE64 not set")

        try:
            raw = base64.b64decode("".join(self.encoded.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigurationError(f"failed to decode KUBECONFIG_BASE64: {e}") from e

        try:
            kubeconfig = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"failed to parse kubeconfig: {e}") from e

        if not isinstance(kubeconfig, dict):
            raise ConfigurationError("failed to parse kubeconfig: not a mapping")

        try:
            return config.new_client_from_config_dict(kubeconfig)
        except ConfigException as e:
            raise ConfigurationError(f"failed to load kubeconfig: {e}") from e


class InClusterSource(CredentialSource):
    name = 'in-cluster'

    def resolve(self) -> client.ApiClient:
        configuration = client.Configuration()
        try:
            config.load_incluster_config(client_configuration=configuration)
        except ConfigException as e:
            raise CredentialsUnavailable(str(e)) from e
        return client.ApiClient(configuration)


class KubeconfigFileSource(CredentialSource):
    name = 'kubeconfig-file'

    def __init__(self, path: Optional[str] = None):
        self.path = path or DEFAULT_KUBECONFIG_PATH

    def resolve(self) -> client.ApiClient:
        if not os.path.exists(self.path):
            raise CredentialsUnavailable(f"no kubeconfig at {self.path}")
        try:
            return config.new_client_from_config(config_file=self.path)
        except (ConfigException, yaml.YAMLError) as e:
            raise ConfigurationError(f"failed to load kubeconfig {self.path}: {e}") from e


def default_sources(cfg: Mapping) -> List[CredentialSource]:
    """The standard source order, built from a Flask config mapping."""
    return [
        KubeconfigBase64Source(cfg.get('KUBECONFIG_BASE64')),
        InClusterSource(),
        KubeconfigFileSource(cfg.get('KUBECONFIG_PATH') or None),
    ]


def resolve_api_client(sources: Iterable[CredentialSource]) -> client.ApiClient:
    """Return an ApiClient from the first available source.

    Raises ConfigurationError when every source is unavailable, or when a
    present source is malformed.
    """
    skipped = []
    for source in sources:
        try:
            api_client = source.resolve()
        except CredentialsUnavailable as e:
            logger.debug(f"Credential source {source.name} unavailable: {e}")
            skipped.append(f"{source.name}: {e}")
            continue

        logger.info(f"Loaded Kubernetes credentials from {source.name}")
        return api_client

    raise ConfigurationError(
        "failed to get k8s config: no credential source available ("
        + "; ".join(skipped) + ")"
    )
