import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from .errors import ConfigurationError

# Provider credentials forwarded from our environment into every instance, in this order
PROVIDER_CREDENTIAL_KEYS: Tuple[str, ...] = (
    'ANTHROPIC_API_KEY',
    'OPENAI_API_KEY',
)


def _env_or(key: str, fallback: str) -> str:
    value = os.getenv(key)
    return value if value else fallback


def _seconds(cfg: Mapping, key: str, default: float) -> float:
    value = cfg.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number of seconds, got {value!r}") from e


def parse_port(value) -> int:
    """Listen port from config; raises ConfigurationError when unusable."""
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"PORT must be an integer, got {value!r}") from e
    if not 0 < port < 65536:
        raise ConfigurationError(f"PORT out of range: {port}")
    return port


def _provider_credentials() -> Dict[str, str]:
    return {key: os.getenv(key, '') for key in PROVIDER_CREDENTIAL_KEYS}


class Config:
    # Kubernetes
    TENANT_NAMESPACE = _env_or('TENANT_NAMESPACE', 'tenants')
    TENANT_DOMAIN = _env_or('TENANT_DOMAIN', 'wareit.ai')
    TENANT_INTERNAL_DOMAIN = _env_or('TENANT_INTERNAL_DOMAIN', f'internal.{TENANT_DOMAIN}')

    # Cluster credentials
    KUBECONFIG_BASE64 = os.getenv('KUBECONFIG_BASE64', '')
    KUBECONFIG_PATH = os.getenv('KUBECONFIG_PATH', '')

    # Timeouts (seconds)
    STORE_TIMEOUT = _env_or('STORE_TIMEOUT', '15')
    REQUEST_TIMEOUT = _env_or('REQUEST_TIMEOUT', '60')

    # Server
    PORT = _env_or('PORT', '8080')

    PROVIDER_CREDENTIALS = _provider_credentials()


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    TENANT_NAMESPACE = 'tenants-test'
    TENANT_DOMAIN = 'example.test'
    TENANT_INTERNAL_DOMAIN = 'internal.example.test'
    KUBECONFIG_BASE64 = ''
    KUBECONFIG_PATH = ''
    PROVIDER_CREDENTIALS = {key: '' for key in PROVIDER_CREDENTIAL_KEYS}


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class InstanceSettings:
    """Static settings shared read-only by the naming, builder and manager components."""
    namespace: str
    domain: str
    internal_domain: str
    provider_credentials: Mapping[str, str] = field(default_factory=dict)
    store_timeout: float = 15.0
    request_timeout: float = 60.0

    def __post_init__(self):
        for name in ('namespace', 'domain', 'internal_domain'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{name} must be a non-empty string")
        if self.store_timeout <= 0 or self.request_timeout <= 0:
            raise ConfigurationError("timeouts must be positive")
        object.__setattr__(self, 'provider_credentials', dict(self.provider_credentials))

    @classmethod
    def from_config(cls, cfg: Mapping) -> "InstanceSettings":
        """Build settings from a Flask config mapping."""
        return cls(
            namespace=cfg.get('TENANT_NAMESPACE', ''),
            domain=cfg.get('TENANT_DOMAIN', ''),
            internal_domain=cfg.get('TENANT_INTERNAL_DOMAIN', ''),
            provider_credentials=cfg.get('PROVIDER_CREDENTIALS') or {},
            store_timeout=_seconds(cfg, 'STORE_TIMEOUT', 15),
            request_timeout=_seconds(cfg, 'REQUEST_TIMEOUT', 60),
        )
