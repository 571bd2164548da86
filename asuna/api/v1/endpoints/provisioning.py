# This module provides API endpoints for inspecting running provisioning monitors.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import List

from fastapi import APIRouter, Request
from asuna.models.api_models import ProvisioningSessionView

router = APIRouter()

@router.get("/",
            response_model=List[ProvisioningSessionView],
            summary="List Provisioning Sessions")
def list_provisioning_sessions(http_request: Request):
    """
    Lists the servers currently being watched from creation to running.
    """
    pool = http_request.app.state.runtime.monitor_pool
    return [
        ProvisioningSessionView(
            name=monitor.session.name,
            identifier=monitor.session.identifier,
            server_uuid=monitor.session.server_uuid,
            phase=monitor.session.phase,
            elapsed_seconds=round(monitor.elapsed(), 1),
            polls=monitor.session.polls,
        )
        for monitor in pool.monitors()
    ]
