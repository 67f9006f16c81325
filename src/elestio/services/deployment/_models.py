"""
Models for deployment polling.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from elestio.services.deployment._config import DEPLOYED_STATUS, ID_FIELDS, RUNNING_STATE


class PollState(BaseModel):
    """Progress of one wait operation."""

    resource_id: str
    start_time: float
    deadline: float
    last_observed_status: str | None = None
    cycles: int = 0

    def elapsed(self, now: float) -> float:
        return now - self.start_time

    def expired(self, now: float) -> bool:
        return now >= self.deadline

    def observe(self, status: str | None) -> bool:
        """Record a status; True when it differs from the previous one."""
        if status == self.last_observed_status:
            return False
        self.last_observed_status = status
        return True


def matches_resource(service: dict[str, Any], resource_id: str) -> bool:
    """Match on either identifier field; ids are compared as strings."""
    return any(
        service.get(field) is not None and str(service.get(field)) == resource_id
        for field in ID_FIELDS
    )


def is_deployed(service: dict[str, Any]) -> bool:
    """Deployment finished and the VM is running."""
    return (
        service.get("deploymentStatus") == DEPLOYED_STATUS
        and service.get("status") == RUNNING_STATE
    )
