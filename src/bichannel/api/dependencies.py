"""Dependencies for the channel API."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header, HTTPException, Request, status

from ..application.channel.use_cases.admin import (
    EmergencySweepService,
    EscrowAuditService,
)
from ..application.channel.use_cases.dispute import DisputeService
from ..application.channel.use_cases.lifecycle import ChannelLifecycleService
from ..crypto.signatures import EcdsaSignatureVerifier, verify_request_signature
from ..envs.channel_env import Settings, get_settings
from ..infrastructure.channel.channel_repository_impl import ChannelRepositoryImpl
from ..infrastructure.channel.height_clock_impl import StoredHeightClock
from ..infrastructure.channel.ledger_repository_impl import LedgerRepositoryImpl
from ..infrastructure.channel.settlement_engine_impl import KeyValueSettlementEngine
from ..infrastructure.database import DatabaseClient, get_database_client
from ..infrastructure.storage import RedisKeyValueStore


@lru_cache()
def get_settings_dependency() -> Settings:
    return get_settings()


@lru_cache()
def get_database_client_dependency() -> DatabaseClient:
    settings = get_settings_dependency()
    return get_database_client(settings)


@lru_cache()
def get_store_dependency() -> RedisKeyValueStore:
    db_client = get_database_client_dependency()
    return RedisKeyValueStore(db_client)


def get_channel_repository() -> ChannelRepositoryImpl:
    return ChannelRepositoryImpl(get_store_dependency())


def get_ledger_repository() -> LedgerRepositoryImpl:
    return LedgerRepositoryImpl(get_store_dependency())


def get_settlement_engine() -> KeyValueSettlementEngine:
    store = get_store_dependency()
    return KeyValueSettlementEngine(
        store, ChannelRepositoryImpl(store), LedgerRepositoryImpl(store)
    )


def get_lifecycle_service() -> ChannelLifecycleService:
    return ChannelLifecycleService(
        get_channel_repository(), get_settlement_engine(), EcdsaSignatureVerifier()
    )


def get_dispute_service() -> DisputeService:
    settings = get_settings_dependency()
    return DisputeService(
        get_channel_repository(),
        get_settlement_engine(),
        EcdsaSignatureVerifier(),
        StoredHeightClock(get_store_dependency()),
        dispute_timeout=settings.dispute_timeout,
    )


def get_sweep_service() -> EmergencySweepService:
    settings = get_settings_dependency()
    return EmergencySweepService(get_settlement_engine(), settings.admin_identity)


def get_audit_service() -> EscrowAuditService:
    return EscrowAuditService(get_ledger_repository())


async def get_caller_identity(
    request: Request,
    x_caller_public_key: str = Header(...),
    x_signature: str = Header(...),
) -> str:
    """Attribute the request to the identity whose key signed its raw body.

    Expected headers:
    - `X-Caller-Public-Key`: base64 DER SubjectPublicKeyInfo of the caller.
    - `X-Signature`: base64 DER ECDSA/SHA-256 signature over the raw body.
    """
    body = await request.body()
    if not verify_request_signature(x_caller_public_key, body, x_signature):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Request signature does not match caller public key",
        )
    return x_caller_public_key
