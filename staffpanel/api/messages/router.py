from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.schemas import CurrentUser
from staffpanel.core.broadcaster import Broadcaster, get_broadcaster
from staffpanel.core.enums import LiveEvent, MessageType
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.outbox import Outbox, get_outbox
from staffpanel.core.schemas import SuccessResponse
from staffpanel.core.uploads import discard_media, media_type_for, save_media
from staffpanel.db.session import get_db

from . import service
from .schemas import MessageDeleted, MessageStats, MessageWithSender

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("", response_model=List[MessageWithSender])
async def list_messages(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[MessageWithSender]:
    return await service.list_messages(db)


@router.get("/stats", response_model=MessageStats)
async def message_stats(
    current_user: CurrentUser = Depends(get_current_user),
) -> MessageStats:
    return MessageStats(unread_count=0)


@router.post(
    "",
    response_model=MessageWithSender,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    content: Optional[str] = Form(None),
    message_type: Optional[str] = Form(None, alias="messageType"),
    file: Optional[UploadFile] = File(None, description="Image or video attachment, up to 10MB"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    outbox: Outbox = Depends(get_outbox),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> MessageWithSender:
    media_url = None
    try:
        if file is not None and file.filename:
            media_url = await save_media(file)
            if not message_type or message_type == MessageType.TEXT.value:
                message_type = media_type_for(file.content_type) or message_type
        message = await service.create_message(db, current_user.id, content, message_type, media_url)
    except ServiceError as e:
        discard_media(media_url)
        raise e.to_http()
    outbox.add(
        broadcaster.broadcast,
        LiveEvent.NEW_MESSAGE.value,
        message.model_dump(mode="json", by_alias=True),
    )
    return message


@router.delete("/{message_id}", response_model=SuccessResponse)
async def delete_message(
    message_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    outbox: Outbox = Depends(get_outbox),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> SuccessResponse:
    try:
        await service.soft_delete_message(db, current_user, message_id)
    except ServiceError as e:
        raise e.to_http()
    outbox.add(
        broadcaster.broadcast,
        LiveEvent.DELETE_MESSAGE.value,
        MessageDeleted(id=message_id).model_dump(mode="json", by_alias=True),
    )
    return SuccessResponse()
