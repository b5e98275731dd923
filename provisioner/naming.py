import re
import secrets

from .errors import InvalidTenantID, RandomSourceError

INSTANCE_NAME_PREFIX = 'tenant-'
INSTANCE_NAME_BYTES = 4
GATEWAY_TOKEN_BYTES = 32

# Any RFC 4122 shaped UUID, no version or variant checks
TENANT_ID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)


def validate_tenant_id(tenant_id) -> str:
    """Return tenant_id unchanged, or raise InvalidTenantID if it is not a UUID."""
    if not isinstance(tenant_id, str) or not TENANT_ID_PATTERN.fullmatch(tenant_id):
        raise InvalidTenantID(tenant_id)
    return tenant_id


def _random_hex(nbytes: int) -> str:
    try:
        return secrets.token_hex(nbytes)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(e) from e


def generate_instance_name() -> str:
    """Generate a resource name like 'tenant-3fa2b91c'"""
    return f"{INSTANCE_NAME_PREFIX}{_random_hex(INSTANCE_NAME_BYTES)}"


def generate_gateway_token() -> str:
    """Generate a 64 character hex gateway token"""
    return _random_hex(GATEWAY_TOKEN_BYTES)


def instance_host(instance_name: str, domain: str) -> str:
    return f"{instance_name}.{domain}"


def instance_url(instance_name: str, domain: str) -> str:
    """Public HTTPS endpoint of an instance. Depends on nothing but the name and domain."""
    return f"https://{instance_host(instance_name, domain)}"
