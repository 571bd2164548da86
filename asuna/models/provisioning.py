# The module is to define the provisioning session tracked by the monitor.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ProvisioningPhase(str, Enum):

    INSTALLING = "installing"
    AWAITING_RUNNING = "awaiting-running"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed-out"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProvisioningPhase.SUCCEEDED, ProvisioningPhase.TIMED_OUT, ProvisioningPhase.FAILED)


class ProvisioningSession(BaseModel):
    """
    State of one server being tracked from creation to running.
    Attributes:
        server_uuid (str): Creation-time identity of the server.
        identifier (str): Short client-facing ID.
        name (str): Server name requested by the user.
        started_at (float): Clock reading when monitoring began.
        phase (ProvisioningPhase): Current phase.
        next_wake_at (Optional[float]): Clock reading of the next scheduled poll.
        polls (int): Number of polls performed.
        recovery_starts (int): Start signals sent after observing 'offline'.
    """
    server_uuid: str
    identifier: str
    name: str
    started_at: float
    phase: ProvisioningPhase = ProvisioningPhase.INSTALLING
    next_wake_at: Optional[float] = None
    polls: int = 0
    recovery_starts: int = 0
    last_state: Optional[str] = Field(default=None, description="Last resource state observed.")
