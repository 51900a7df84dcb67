"""Story: The owner pulls the whole escrow out in an emergency (use case-based test)."""

from __future__ import annotations

import pytest

from bichannel.application.channel.dtos import (
    CooperativeCloseRequestDTO,
    CreateChannelRequestDTO,
    FundChannelRequestDTO,
)
from bichannel.application.channel.use_cases.admin import (
    EmergencySweepService,
    EscrowAuditService,
)
from bichannel.application.channel.use_cases.lifecycle import ChannelLifecycleService
from bichannel.domain.errors import (
    EscrowInvariantError,
    InsufficientFundsError,
    NotAuthorizedError,
)
from tests.fixtures import InMemoryChannelCore, PartyActor

CHANNEL_ID = b"swept".hex()
DEPOSIT = 250_000


@pytest.fixture
async def open_channel(
    lifecycle_service: ChannelLifecycleService,
    funded_alice: PartyActor,
    bob: PartyActor,
) -> None:
    await lifecycle_service.create_channel(
        funded_alice.identity,
        CreateChannelRequestDTO(
            channel_id_hex=CHANNEL_ID, party_b=bob.identity, initial_deposit=DEPOSIT
        ),
    )


@pytest.mark.usefixtures("open_channel")
async def test_non_owner_cannot_sweep(
    core: InMemoryChannelCore,
    sweep_service: EmergencySweepService,
    funded_alice: PartyActor,
) -> None:
    with pytest.raises(NotAuthorizedError):
        await sweep_service.emergency_sweep(funded_alice.identity)

    assert await core.ledger_repo.get_escrow_balance() == DEPOSIT


@pytest.mark.usefixtures("open_channel")
async def test_sweep_empties_escrow_and_strands_channels(
    core: InMemoryChannelCore,
    lifecycle_service: ChannelLifecycleService,
    sweep_service: EmergencySweepService,
    audit_service: EscrowAuditService,
    funded_alice: PartyActor,
    bob: PartyActor,
    admin: PartyActor,
) -> None:
    # When: The owner sweeps
    result = await sweep_service.emergency_sweep(admin.identity)

    # Then: The whole escrow lands on the owner's balance
    assert result.amount == DEPOSIT
    assert result.recipient == admin.identity
    assert await core.ledger_repo.get_balance(admin.identity) == DEPOSIT
    assert await core.ledger_repo.get_escrow_balance() == 0

    # And: The audit reports the open channel as uncovered
    audit = await audit_service.check()
    assert audit.is_covered is False
    assert audit.locked_total == DEPOSIT
    assert audit.shortfall == DEPOSIT

    # And: Paying the channel out fails for lack of escrow
    with pytest.raises(InsufficientFundsError):
        await lifecycle_service.cooperative_close(
            funded_alice.identity,
            CooperativeCloseRequestDTO(
                channel_id_hex=CHANNEL_ID,
                party_b=bob.identity,
                balance_a=DEPOSIT,
                balance_b=0,
                signature_a_b64=funded_alice.sign_settlement(CHANNEL_ID, DEPOSIT, 0),
                signature_b_b64=bob.sign_settlement(CHANNEL_ID, DEPOSIT, 0),
            ),
        )

    # And: New deposits cannot lock funds the escrow no longer covers
    with pytest.raises(EscrowInvariantError):
        await lifecycle_service.fund_channel(
            funded_alice.identity,
            FundChannelRequestDTO(channel_id_hex=CHANNEL_ID, party_b=bob.identity, amount=10),
        )
    with pytest.raises(EscrowInvariantError):
        await lifecycle_service.create_channel(
            funded_alice.identity,
            CreateChannelRequestDTO(
                channel_id_hex=b"fresh".hex(), party_b=bob.identity, initial_deposit=10
            ),
        )


async def test_sweep_of_empty_escrow_moves_nothing(
    core: InMemoryChannelCore,
    sweep_service: EmergencySweepService,
    audit_service: EscrowAuditService,
    admin: PartyActor,
) -> None:
    result = await sweep_service.emergency_sweep(admin.identity)

    assert result.amount == 0
    assert await core.ledger_repo.get_balance(admin.identity) == 0
    audit = await audit_service.check()
    assert audit.is_covered is True
    assert audit.shortfall is None
