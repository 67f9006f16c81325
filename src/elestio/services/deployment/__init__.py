"""
Deployment polling for Elestio services.

Waits for a newly created service to reach ``Deployed`` / ``running``
with a bounded deadline and status-change notifications.
"""

from elestio.services.deployment._aio import AsyncDeploymentPoller
from elestio.services.deployment._models import PollState, is_deployed, matches_resource

__all__ = [
    "AsyncDeploymentPoller",
    "PollState",
    "is_deployed",
    "matches_resource",
]
