"""Audit record service.

Owns the audit/rating pairing and the existence checks. Missing records are
reported as ``None`` (or an empty page), never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from roboaudit.models import Audit, RubricRating
from roboaudit.schemas.audit import AuditRecord, CreateAuditRequest, UpdateRatingRequest
from roboaudit.storage import repositories

logger = logging.getLogger(__name__)


@dataclass
class AuditPage:
    """One window of audits plus the unfiltered total."""

    audits: list[AuditRecord] = field(default_factory=list)
    total: int = 0


async def create_audit(db: AsyncSession, body: CreateAuditRequest) -> AuditRecord:
    """Create an audit and its rating under a fresh id."""
    audit_id = str(uuid4())
    audit = Audit(id=audit_id, prompt=body.prompt, response=body.response)
    rating = RubricRating(
        audit_id=audit_id,
        truthfulness=body.truthfulness,
        detail=body.detail,
        safety=body.safety,
        quality=body.quality,
    )
    await repositories.create_audit_with_rating(db, audit, rating)
    logger.info("Created audit %s", audit_id)
    return AuditRecord(
        id=audit_id,
        prompt=body.prompt,
        response=body.response,
        rubric_rating={
            "truthfulness": body.truthfulness,
            "detail": body.detail,
            "safety": body.safety,
            "quality": body.quality,
        },
    )


async def get_audit(db: AsyncSession, audit_id: str) -> AuditRecord | None:
    audit = await repositories.find_audit_by_id(db, audit_id)
    if audit is None:
        return None
    return AuditRecord.model_validate(audit)


async def list_audits(db: AsyncSession, offset: int, limit: int) -> AuditPage:
    """
    Page through audits. An empty ``audits`` list means there is no data at this
    page; ``total`` still reports every stored audit.
    """
    audits, total = await repositories.find_audits_page(db, offset, limit)
    return AuditPage(
        audits=[AuditRecord.model_validate(a) for a in audits],
        total=total,
    )


async def update_ratings(
    db: AsyncSession, audit_id: str, body: UpdateRatingRequest
) -> dict[str, Any] | None:
    """Apply the supplied rating fields; returns exactly what was applied."""
    rating = await repositories.find_rating_by_audit_id(db, audit_id)
    if rating is None:
        return None

    fields = body.supplied_fields()
    if fields and not await repositories.update_rating(db, audit_id, fields):
        # Removed between the existence check and the update.
        return None
    logger.info("Updated ratings %s for audit %s", sorted(fields), audit_id)
    return {name: value.value for name, value in fields.items()}


async def delete_audit(db: AsyncSession, audit_id: str) -> str | None:
    audit = await repositories.find_audit_by_id(db, audit_id, with_rating=False)
    if audit is None:
        return None
    if not await repositories.delete_audit_with_rating(db, audit_id):
        return None
    logger.info("Deleted audit %s", audit_id)
    return audit_id
