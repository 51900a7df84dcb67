"""Channel lifecycle and dispute API routes."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status
from prometheus_client import Counter, Histogram

from ...application.channel.dtos import (
    ChannelInfoResponseDTO,
    CooperativeCloseRequestDTO,
    CreateChannelRequestDTO,
    DisputeOpenedResponseDTO,
    FundChannelRequestDTO,
    GetChannelInfoRequestDTO,
    InitiateUnilateralCloseRequestDTO,
    ResolveUnilateralCloseRequestDTO,
    SettlementResponseDTO,
)
from ...application.channel.use_cases.dispute import DisputeService
from ...application.channel.use_cases.lifecycle import ChannelLifecycleService
from ...domain.errors import ChannelError
from ..dependencies import (
    get_caller_identity,
    get_dispute_service,
    get_lifecycle_service,
)
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/channels", tags=["channels"])

T = TypeVar("T")

channel_operations_total = Counter(
    "channel_operations_total",
    "Total channel operations processed",
    ["operation", "status"],
)
channel_operation_duration_milliseconds = Histogram(
    "channel_operation_duration_milliseconds",
    "Wall time to process a channel operation (ms)",
    ["operation", "status"],
)


def _observe(operation: str, outcome: str, start_time: float) -> None:
    elapsed = (time.perf_counter() - start_time) * 1000
    channel_operations_total.labels(operation=operation, status=outcome).inc()
    channel_operation_duration_milliseconds.labels(
        operation=operation, status=outcome
    ).observe(elapsed)


async def _run_operation(operation: str, call: Awaitable[T]) -> T:
    start_time = time.perf_counter()
    try:
        result = await call
    except ChannelError as e:
        _observe(operation, "client_error", start_time)
        raise to_http_exception(e)
    except Exception as e:
        _observe(operation, "server_error", start_time)
        logger.exception("Internal server error during %s: %s", operation, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error during {operation}",
        )
    _observe(operation, "success", start_time)
    return result


@router.post(
    "/create",
    response_model=ChannelInfoResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_channel(
    payload: CreateChannelRequestDTO,
    caller: str = Depends(get_caller_identity),
    service: ChannelLifecycleService = Depends(get_lifecycle_service),
) -> ChannelInfoResponseDTO:
    return await _run_operation("create", service.create_channel(caller, payload))


@router.post("/fund", response_model=ChannelInfoResponseDTO)
async def fund_channel(
    payload: FundChannelRequestDTO,
    caller: str = Depends(get_caller_identity),
    service: ChannelLifecycleService = Depends(get_lifecycle_service),
) -> ChannelInfoResponseDTO:
    return await _run_operation("fund", service.fund_channel(caller, payload))


@router.post("/close/cooperative", response_model=SettlementResponseDTO)
async def cooperative_close(
    payload: CooperativeCloseRequestDTO,
    caller: str = Depends(get_caller_identity),
    service: ChannelLifecycleService = Depends(get_lifecycle_service),
) -> SettlementResponseDTO:
    return await _run_operation(
        "cooperative_close", service.cooperative_close(caller, payload)
    )


@router.post("/close/unilateral/initiate", response_model=DisputeOpenedResponseDTO)
async def initiate_unilateral_close(
    payload: InitiateUnilateralCloseRequestDTO,
    caller: str = Depends(get_caller_identity),
    service: DisputeService = Depends(get_dispute_service),
) -> DisputeOpenedResponseDTO:
    return await _run_operation(
        "initiate_unilateral_close",
        service.initiate_unilateral_close(caller, payload),
    )


@router.post("/close/unilateral/resolve", response_model=SettlementResponseDTO)
async def resolve_unilateral_close(
    payload: ResolveUnilateralCloseRequestDTO,
    caller: str = Depends(get_caller_identity),
    service: DisputeService = Depends(get_dispute_service),
) -> SettlementResponseDTO:
    return await _run_operation(
        "resolve_unilateral_close",
        service.resolve_unilateral_close(caller, payload),
    )


@router.get("/info", response_model=ChannelInfoResponseDTO)
async def get_channel_info(
    channel_id_hex: str,
    party_a: str,
    party_b: str,
    service: ChannelLifecycleService = Depends(get_lifecycle_service),
) -> ChannelInfoResponseDTO:
    info = await service.get_channel_info(
        GetChannelInfoRequestDTO(
            channel_id_hex=channel_id_hex, party_a=party_a, party_b=party_b
        )
    )
    if info is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Channel not found"
        )
    return info
