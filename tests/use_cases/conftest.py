"""Pytest fixtures for use case tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest

from bichannel.application.channel.use_cases.admin import (
    EmergencySweepService,
    EscrowAuditService,
)
from bichannel.application.channel.use_cases.dispute import DisputeService
from bichannel.application.channel.use_cases.lifecycle import ChannelLifecycleService
from bichannel.crypto.signatures import EcdsaSignatureVerifier
from tests.fixtures import InMemoryChannelCore, PartyActor
from tests.use_cases.helpers import STARTING_BALANCE


@pytest.fixture
async def core() -> AsyncGenerator[InMemoryChannelCore, None]:
    """Registry, ledger, clock and settlement engine over one in-memory store."""
    core = InMemoryChannelCore()
    await core.initialize()
    yield core
    core.clear()


@pytest.fixture
def lifecycle_service(core: InMemoryChannelCore) -> ChannelLifecycleService:
    return ChannelLifecycleService(
        core.channel_repo, core.settlement, EcdsaSignatureVerifier()
    )


@pytest.fixture
def dispute_service(core: InMemoryChannelCore) -> DisputeService:
    return DisputeService(
        core.channel_repo, core.settlement, EcdsaSignatureVerifier(), core.clock
    )


@pytest.fixture
def sweep_service(
    core: InMemoryChannelCore, admin: PartyActor
) -> EmergencySweepService:
    return EmergencySweepService(core.settlement, admin.identity)


@pytest.fixture
def audit_service(core: InMemoryChannelCore) -> EscrowAuditService:
    return EscrowAuditService(core.ledger_repo)


@pytest.fixture
async def funded_alice(core: InMemoryChannelCore, alice: PartyActor) -> PartyActor:
    """Alice with STARTING_BALANCE on the ledger."""
    await core.ledger_repo.credit(alice.identity, STARTING_BALANCE)
    return alice
