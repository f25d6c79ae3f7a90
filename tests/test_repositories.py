"""Tests for the transactional audit/rating data access functions."""

from uuid import uuid4

import pytest

from roboaudit.errors import ConflictError
from roboaudit.models import Audit, Detail, Quality, RubricRating, Safety, Truthfulness
from roboaudit.storage import repositories


def _pair(audit_id: str | None = None) -> tuple[Audit, RubricRating]:
    audit_id = audit_id or str(uuid4())
    audit = Audit(id=audit_id, prompt="What is 2+2?", response="4")
    rating = RubricRating(
        audit_id=audit_id,
        truthfulness=Truthfulness.CORRECT,
        detail=Detail.TOO_SHORT,
        safety=Safety.SAFE,
        quality=Quality.OKAY,
    )
    return audit, rating


async def _create(session_maker, audit_id: str | None = None) -> str:
    audit, rating = _pair(audit_id)
    async with session_maker() as db:
        await repositories.create_audit_with_rating(db, audit, rating)
    return audit.id


@pytest.mark.asyncio
async def test_create_writes_one_row_per_table(session_maker, count_rows):
    """Create writes the audit and its rating under the same id."""
    audit_id = await _create(session_maker)

    assert await count_rows() == (1, 1)
    async with session_maker() as db:
        audit = await repositories.find_audit_by_id(db, audit_id)
    assert audit.prompt == "What is 2+2?"
    assert audit.rubric_rating.audit_id == audit_id
    assert audit.rubric_rating.detail == Detail.TOO_SHORT


@pytest.mark.asyncio
async def test_failure_between_inserts_leaves_no_rows(
    session_maker, count_rows, monkeypatch
):
    """A failure after the audit insert rolls the audit back too."""

    async def fail(db, rating):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(repositories, "_insert_rating", fail)
    audit, rating = _pair()

    async with session_maker() as db:
        with pytest.raises(RuntimeError, match="connection lost"):
            await repositories.create_audit_with_rating(db, audit, rating)

    assert await count_rows() == (0, 0)


@pytest.mark.asyncio
async def test_duplicate_id_is_refused(session_maker, count_rows):
    """A second pair under an existing id raises ConflictError and writes nothing."""
    audit_id = await _create(session_maker)

    audit, rating = _pair(audit_id)
    async with session_maker() as db:
        with pytest.raises(ConflictError):
            await repositories.create_audit_with_rating(db, audit, rating)

    assert await count_rows() == (1, 1)


@pytest.mark.asyncio
async def test_delete_removes_both_rows(session_maker, count_rows):
    audit_id = await _create(session_maker)
    await _create(session_maker)

    async with session_maker() as db:
        assert await repositories.delete_audit_with_rating(db, audit_id) is True

    assert await count_rows() == (1, 1)
    async with session_maker() as db:
        assert await repositories.find_audit_by_id(db, audit_id) is None
        assert await repositories.find_rating_by_audit_id(db, audit_id) is None


@pytest.mark.asyncio
async def test_failure_between_deletes_removes_nothing(
    session_maker, count_rows, monkeypatch
):
    """A failure after the rating delete restores the rating."""
    audit_id = await _create(session_maker)

    async def fail(db, audit_id):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(repositories, "_delete_audit", fail)

    async with session_maker() as db:
        with pytest.raises(RuntimeError, match="connection lost"):
            await repositories.delete_audit_with_rating(db, audit_id)

    assert await count_rows() == (1, 1)
    async with session_maker() as db:
        assert await repositories.find_rating_by_audit_id(db, audit_id) is not None


@pytest.mark.asyncio
async def test_delete_unknown_id_returns_false(session_maker):
    async with session_maker() as db:
        assert await repositories.delete_audit_with_rating(db, str(uuid4())) is False


@pytest.mark.asyncio
async def test_update_rating_changes_only_given_columns(session_maker):
    audit_id = await _create(session_maker)

    async with session_maker() as db:
        updated = await repositories.update_rating(
            db, audit_id, {"quality": Quality.EXCELLENT, "safety": Safety.UNSAFE}
        )
    assert updated is True

    async with session_maker() as db:
        rating = await repositories.find_rating_by_audit_id(db, audit_id)
    assert rating.quality == Quality.EXCELLENT
    assert rating.safety == Safety.UNSAFE
    assert rating.truthfulness == Truthfulness.CORRECT
    assert rating.detail == Detail.TOO_SHORT


@pytest.mark.asyncio
async def test_update_rating_unknown_id_returns_false(session_maker):
    async with session_maker() as db:
        assert (
            await repositories.update_rating(db, str(uuid4()), {"quality": Quality.BAD})
            is False
        )


@pytest.mark.asyncio
async def test_find_audits_page_reports_unfiltered_total(session_maker):
    created = {await _create(session_maker) for _ in range(3)}

    async with session_maker() as db:
        first, total = await repositories.find_audits_page(db, 0, 2)
        second, _ = await repositories.find_audits_page(db, 2, 2)
        beyond, total_beyond = await repositories.find_audits_page(db, 10, 2)

    assert total == 3
    assert len(first) == 2
    assert len(second) == 1
    assert {a.id for a in first} | {a.id for a in second} == created
    assert all(a.rubric_rating is not None for a in first + second)
    assert beyond == []
    assert total_beyond == 3
