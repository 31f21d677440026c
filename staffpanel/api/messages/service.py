"""Chat messages. Delete is soft: the row stays, is_deleted hides its content."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import User
from staffpanel.auth.rbac import is_owner_or_admin
from staffpanel.auth.schemas import CurrentUser
from staffpanel.auth.services import user_to_response
from staffpanel.core.enums import MessageType
from staffpanel.core.exceptions import bad_request, forbidden, not_found
from staffpanel.core.models import Message

from .schemas import MessageWithSender


def _message_to_response(m: Message) -> MessageWithSender:
    return MessageWithSender(
        id=m.id,
        sender_id=m.sender_id,
        content=None if m.is_deleted else m.content,
        message_type=m.message_type,
        media_url=None if m.is_deleted else m.media_url,
        is_deleted=m.is_deleted,
        created_at=m.created_at,
        sender=user_to_response(m.sender),
    )


def _with_sender():
    return selectinload(Message.sender).selectinload(User.role)


async def get_message(db: AsyncSession, message_id: int) -> Optional[Message]:
    return await db.get(Message, message_id)


async def list_messages(db: AsyncSession) -> List[MessageWithSender]:
    """Every message, deleted ones included, oldest first."""
    result = await db.execute(
        select(Message).options(_with_sender()).order_by(Message.created_at, Message.id)
    )
    return [_message_to_response(m) for m in result.scalars().all()]


async def create_message(
    db: AsyncSession,
    sender_id: int,
    content: Optional[str],
    message_type: Optional[str],
    media_url: Optional[str],
) -> MessageWithSender:
    content = content.strip() if content and content.strip() else None
    if content is None and media_url is None:
        raise bad_request("Message must have content or an attachment")
    try:
        kind = MessageType(message_type or MessageType.TEXT.value)
    except ValueError:
        raise bad_request("messageType must be one of text, image, video, link")

    msg = Message(
        sender_id=sender_id,
        content=content,
        message_type=kind.value,
        media_url=media_url,
    )
    db.add(msg)
    await db.commit()
    result = await db.execute(
        select(Message)
        .options(_with_sender())
        .where(Message.id == msg.id)
        .execution_options(populate_existing=True)
    )
    return _message_to_response(result.scalar_one())


async def soft_delete_message(db: AsyncSession, current_user: CurrentUser, message_id: int) -> None:
    """Only the sender or an admin may delete."""
    msg = await get_message(db, message_id)
    if msg is None or msg.is_deleted:
        raise not_found("Message")
    if not is_owner_or_admin(current_user, msg.sender_id):
        raise forbidden()
    msg.is_deleted = True
    await db.commit()
