"""Repository functions for audits and their rubric ratings.

Writes that touch both tables run inside one transaction: either both rows are
written or removed, or neither is. Failures roll the transaction back and
propagate unchanged.
"""

import logging
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from roboaudit.errors import ConflictError
from roboaudit.models import Audit, RubricRating

logger = logging.getLogger(__name__)


async def _insert_audit(db: AsyncSession, audit: Audit) -> None:
    db.add(audit)
    await db.flush()


async def _insert_rating(db: AsyncSession, rating: RubricRating) -> None:
    db.add(rating)
    await db.flush()


async def _delete_rating(db: AsyncSession, audit_id: str) -> int:
    result = await db.execute(
        delete(RubricRating).where(RubricRating.audit_id == audit_id)
    )
    return result.rowcount


async def _delete_audit(db: AsyncSession, audit_id: str) -> int:
    result = await db.execute(delete(Audit).where(Audit.id == audit_id))
    return result.rowcount


async def create_audit_with_rating(
    db: AsyncSession, audit: Audit, rating: RubricRating
) -> Audit:
    """Insert an audit and its rating atomically."""
    try:
        await _insert_audit(db, audit)
        await _insert_rating(db, rating)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Rejected duplicate audit %s", audit.id)
        raise ConflictError(f"Audit {audit.id} already has a rating") from exc
    except Exception:
        await db.rollback()
        logger.exception("Rolled back creation of audit %s", audit.id)
        raise
    return audit


async def delete_audit_with_rating(db: AsyncSession, audit_id: str) -> bool:
    """Delete a rating and then its audit atomically.

    Returns False (nothing removed) when the audit does not exist.
    """
    try:
        await _delete_rating(db, audit_id)
        removed = await _delete_audit(db, audit_id)
        if not removed:
            await db.rollback()
            return False
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Rolled back deletion of audit %s", audit_id)
        raise
    return True


async def find_audit_by_id(
    db: AsyncSession, audit_id: str, with_rating: bool = True
) -> Audit | None:
    """Get an audit by id, joined with its rating."""
    stmt = select(Audit).where(Audit.id == audit_id)
    if with_rating:
        stmt = stmt.options(joinedload(Audit.rubric_rating))
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def find_audits_page(
    db: AsyncSession, offset: int, limit: int
) -> tuple[list[Audit], int]:
    """
    Load one page of audits (stable order) together with the total row count,
    which ignores the paging window.
    """
    result = await db.execute(
        select(Audit)
        .options(joinedload(Audit.rubric_rating))
        .order_by(Audit.created_at, Audit.id)
        .offset(offset)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    audits = list(result.scalars().all())
    total = await db.scalar(select(func.count()).select_from(Audit))
    return audits, total or 0


async def find_rating_by_audit_id(
    db: AsyncSession, audit_id: str
) -> RubricRating | None:
    result = await db.execute(
        select(RubricRating)
        .where(RubricRating.audit_id == audit_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def update_rating(
    db: AsyncSession, audit_id: str, fields: dict[str, Any]
) -> bool:
    """Set only the given rating columns. Returns False when no row matched."""
    try:
        result = await db.execute(
            update(RubricRating)
            .where(RubricRating.audit_id == audit_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            await db.rollback()
            return False
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Rolled back rating update for audit %s", audit_id)
        raise
    return True
