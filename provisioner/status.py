from enum import Enum
from typing import Optional


class InstanceStatus(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    ERROR = "error"


# Operator phase -> caller facing status. Anything else is still starting.
PHASE_STATUS = {
    "Running": InstanceStatus.RUNNING,
    "Failed": InstanceStatus.ERROR,
}


def project_phase(phase: Optional[str]) -> InstanceStatus:
    return PHASE_STATUS.get(phase, InstanceStatus.STARTING)


def phase_of(resource: dict) -> Optional[str]:
    """Read status.phase from a raw custom object, tolerating missing sections."""
    status = resource.get("status")
    if not isinstance(status, dict):
        return None
    phase = status.get("phase")
    return phase if isinstance(phase, str) else None
