"""Access requests: submit, list, approve (creates the user), reject."""

from typing import List, Optional

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from staffpanel.auth.models import User
from staffpanel.auth.security import hash_password_async
from staffpanel.auth.services import get_user_by_username
from staffpanel.core.enums import AccessRequestStatus
from staffpanel.core.exceptions import ServiceError, bad_request, not_found
from staffpanel.core.models import AccessRequest

from .schemas import AccessRequestCreate, AccessRequestResponse


def _request_to_response(r: AccessRequest) -> AccessRequestResponse:
    return AccessRequestResponse(
        id=r.id,
        username=r.username,
        email=r.email,
        name=r.name,
        status=r.status,
        requested_at=r.requested_at,
    )


async def get_access_request(db: AsyncSession, request_id: int) -> Optional[AccessRequest]:
    return await db.get(AccessRequest, request_id)


async def get_access_request_by_username(db: AsyncSession, username: str) -> Optional[AccessRequest]:
    result = await db.execute(select(AccessRequest).where(AccessRequest.username == username))
    return result.scalar_one_or_none()


async def create_access_request(
    db: AsyncSession,
    payload: AccessRequestCreate,
) -> AccessRequestResponse:
    username = payload.username
    if await get_user_by_username(db, username):
        raise bad_request("Username already taken")
    if await get_access_request_by_username(db, username):
        raise bad_request("Access request already submitted")

    req = AccessRequest(
        username=username,
        email=payload.email,
        name=payload.name,
        password_hash=await hash_password_async(payload.password),
        status=AccessRequestStatus.PENDING.value,
    )
    db.add(req)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise bad_request("Access request already submitted")
    await db.refresh(req)
    return _request_to_response(req)


async def list_access_requests(db: AsyncSession) -> List[AccessRequestResponse]:
    result = await db.execute(
        select(AccessRequest).order_by(AccessRequest.requested_at.desc(), AccessRequest.id.desc())
    )
    return [_request_to_response(r) for r in result.scalars().all()]


async def _transition_from_pending(
    db: AsyncSession,
    request_id: int,
    new_status: AccessRequestStatus,
) -> AccessRequest:
    """Move a pending request to new_status; fails if it was already processed.

    The UPDATE is conditional on status = pending so two concurrent approvals
    cannot both succeed.
    """
    req = await get_access_request(db, request_id)
    if req is None:
        raise not_found("Request")
    result = await db.execute(
        update(AccessRequest)
        .where(
            AccessRequest.id == request_id,
            AccessRequest.status == AccessRequestStatus.PENDING.value,
        )
        .values(status=new_status.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise bad_request("Request already processed")
    set_committed_value(req, "status", new_status.value)
    return req


async def approve_access_request(db: AsyncSession, request_id: int) -> AccessRequest:
    """Create an approved, non-admin user from the request and mark it approved."""
    req = await _transition_from_pending(db, request_id, AccessRequestStatus.APPROVED)
    db.add(
        User(
            username=req.username,
            password_hash=req.password_hash,  # already hashed
            email=req.email,
            name=req.name,
            is_admin=False,
            is_approved=True,
            avatar=None,
            role_id=None,
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise bad_request("Username already taken")
    except Exception as e:
        await db.rollback()
        raise ServiceError("Failed to approve request", status.HTTP_500_INTERNAL_SERVER_ERROR) from e
    return req


async def reject_access_request(db: AsyncSession, request_id: int) -> AccessRequest:
    req = await _transition_from_pending(db, request_id, AccessRequestStatus.REJECTED)
    await db.commit()
    return req
