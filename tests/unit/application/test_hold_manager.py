"""Tests del administrador de retenciones."""

import asyncio
from datetime import timedelta

import pytest

from club_booking.application.hold_manager import HoldManager
from club_booking.domain.errors import AlreadyHeldError, ResourceNotFoundError
from conftest import NOW, ROOM_101, ROOM_102, ROOM_201


@pytest.fixture
def hold_manager(bundle, clock):
    return HoldManager(bundle["resource_repo"], clock, ttl_seconds=180)


class TestPlaceHold:
    async def test_grant_expires_after_ttl(self, hold_manager, bundle):
        grant = await hold_manager.place_hold(ROOM_101, "M-1")

        assert grant.expires_at == NOW + timedelta(minutes=3)
        resource = await bundle["resource_repo"].get(ROOM_101)
        assert resource.on_hold
        assert resource.hold_by == "M-1"

    async def test_same_holder_refreshes_expiry(self, hold_manager, clock):
        await hold_manager.place_hold(ROOM_101, "M-1")
        clock.advance(minutes=1)

        grant = await hold_manager.place_hold(ROOM_101, "M-1")

        assert grant.expires_at == NOW + timedelta(minutes=4)

    async def test_other_holder_is_rejected(self, hold_manager):
        await hold_manager.place_hold(ROOM_101, "M-1")

        with pytest.raises(AlreadyHeldError) as exc_info:
            await hold_manager.place_hold(ROOM_101, "M-2")

        assert exc_info.value.kind == "ALREADY_HELD"
        assert exc_info.value.holder_id == "M-1"

    async def test_expired_hold_can_be_taken_over(self, hold_manager, clock, bundle):
        """Retención de M1 con TTL de 3 minutos; a los 4 minutos M2 puede retener."""
        await hold_manager.place_hold(ROOM_101, "M-1")
        clock.advance(minutes=4)

        assert not await hold_manager.is_held_by_other(ROOM_101, "M-2")
        grant = await hold_manager.place_hold(ROOM_101, "M-2")

        assert grant.holder_id == "M-2"
        assert (await bundle["resource_repo"].get(ROOM_101)).hold_by == "M-2"

    async def test_unknown_resource(self, hold_manager):
        with pytest.raises(ResourceNotFoundError):
            await hold_manager.place_hold(999, "M-1")

    async def test_concurrent_claims_have_single_winner(self, hold_manager):
        results = await asyncio.gather(
            *(hold_manager.place_hold(ROOM_101, f"M-{i}") for i in range(5)),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(winners) == 1
        assert all(isinstance(r, AlreadyHeldError) for r in results if isinstance(r, Exception))


class TestMultiHold:
    async def test_all_or_nothing(self, hold_manager, bundle):
        await hold_manager.place_hold(ROOM_201, "M-OTHER")

        with pytest.raises(AlreadyHeldError):
            await hold_manager.place_holds([ROOM_101, ROOM_102, ROOM_201], "M-1")

        assert not (await bundle["resource_repo"].get(ROOM_101)).on_hold
        assert not (await bundle["resource_repo"].get(ROOM_102)).on_hold
        assert (await bundle["resource_repo"].get(ROOM_201)).hold_by == "M-OTHER"

    async def test_places_every_hold(self, hold_manager):
        grants = await hold_manager.place_holds([ROOM_101, ROOM_102], "M-1")
        assert [g.resource_id for g in grants] == [ROOM_101, ROOM_102]


class TestReleaseHold:
    async def test_release_own_hold(self, hold_manager, bundle):
        await hold_manager.place_hold(ROOM_101, "M-1")

        assert await hold_manager.release_hold(ROOM_101, "M-1")
        assert not (await bundle["resource_repo"].get(ROOM_101)).on_hold

    async def test_release_foreign_hold_is_not_fatal(self, hold_manager, bundle):
        await hold_manager.place_hold(ROOM_101, "M-1")

        assert not await hold_manager.release_hold(ROOM_101, "M-2")
        assert (await bundle["resource_repo"].get(ROOM_101)).hold_by == "M-1"

    async def test_release_missing_hold(self, hold_manager):
        assert not await hold_manager.release_hold(ROOM_101, "M-1")

    async def test_release_holds_counts(self, hold_manager):
        await hold_manager.place_holds([ROOM_101, ROOM_102], "M-1")
        assert await hold_manager.release_holds([ROOM_101, ROOM_102, ROOM_201], "M-1") == 2
