from __future__ import annotations

from fastapi import APIRouter, Depends

from ...application.channel.dtos import EscrowAuditResponseDTO, SweepResponseDTO
from ...application.channel.use_cases.admin import (
    EmergencySweepService,
    EscrowAuditService,
)
from ...domain.errors import ChannelError
from ..dependencies import get_audit_service, get_caller_identity, get_sweep_service
from ..errors import to_http_exception

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/sweep", response_model=SweepResponseDTO)
async def emergency_sweep(
    caller: str = Depends(get_caller_identity),
    service: EmergencySweepService = Depends(get_sweep_service),
) -> SweepResponseDTO:
    try:
        return await service.emergency_sweep(caller)
    except ChannelError as e:
        raise to_http_exception(e)


@router.get("/escrow", response_model=EscrowAuditResponseDTO)
async def audit_escrow(
    service: EscrowAuditService = Depends(get_audit_service),
) -> EscrowAuditResponseDTO:
    return await service.check()
