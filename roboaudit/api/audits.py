"""Audit endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from roboaudit.database import get_db
from roboaudit.errors import AuditNotFoundError, AuditPageNotFoundError
from roboaudit.schemas.audit import (
    AuditId,
    CreateAuditRequest,
    Limit,
    Offset,
    UpdateRatingRequest,
)
from roboaudit.services import audits as audit_service

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("/audits/{offset}/{limit}")
async def list_audits(offset: Offset, limit: Limit, db: DbDep):
    """List one page of audits with their ratings, plus the total audit count."""
    page = await audit_service.list_audits(db, offset, limit)
    if not page.audits:
        raise AuditPageNotFoundError(total_audits=page.total)
    return {
        "msg": "Found audits!",
        "data": [audit.render() for audit in page.audits],
        "total_audits": page.total,
    }


@router.get("/audit/{audit_id}")
async def get_audit(audit_id: AuditId, db: DbDep):
    """Get a single audit joined with its rating."""
    audit = await audit_service.get_audit(db, audit_id)
    if audit is None:
        raise AuditNotFoundError("Audit not found!")
    return {"msg": "Found audit!", "data": audit.render()}


@router.post("/audit")
async def create_audit(body: CreateAuditRequest, db: DbDep):
    """Create an audit and its rubric rating in one transaction."""
    audit = await audit_service.create_audit(db, body)
    return {"msg": "Successfully created audit!", "data": audit.render()}


@router.patch("/audit/{audit_id}")
async def update_audit_ratings(
    audit_id: AuditId, body: UpdateRatingRequest, db: DbDep
):
    """Update any subset of an audit's ratings; echoes the applied fields."""
    applied = await audit_service.update_ratings(db, audit_id, body)
    if applied is None:
        raise AuditNotFoundError("Audit does not exist!")
    return {"msg": "Successfully updated audit ratings!", "data": applied}


@router.delete("/audit/{audit_id}")
async def delete_audit(audit_id: AuditId, db: DbDep):
    """Delete an audit together with its rating."""
    deleted_id = await audit_service.delete_audit(db, audit_id)
    if deleted_id is None:
        raise AuditNotFoundError("Audit does not exist!")
    return {"msg": "Successfully deleted audit!", "data": {"id": deleted_id}}
