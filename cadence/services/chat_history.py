"""Append-only chat history, partitioned by conversation mode."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models import ChatMessage, ChatRole
from cadence.schemas.chat import ChatMessageRead

logger = logging.getLogger(__name__)


class ChatHistory:
    """Reads and appends chat messages."""

    async def add_message(
        self,
        db: AsyncSession,
        session_id: str,
        mode: str,
        role: str,
        content: str,
        course_context: str | None = None,
        task_references: str | None = None,
    ) -> None:
        """Append a single message."""
        db.add(
            ChatMessage(
                session_id=session_id,
                mode=mode,
                role=role,
                content=content,
                course_context=course_context,
                task_references=task_references,
            )
        )
        await db.commit()

    async def append_turn(
        self,
        db: AsyncSession,
        session_id: str,
        mode: str,
        user_text: str,
        assistant_text: str,
    ) -> None:
        """Write a user message and the assistant reply in one commit, user first."""
        user_row = ChatMessage(
            session_id=session_id, mode=mode, role=ChatRole.USER.value, content=user_text
        )
        db.add(user_row)
        # Flush so the user row gets the lower id
        await db.flush()
        db.add(
            ChatMessage(
                session_id=session_id,
                mode=mode,
                role=ChatRole.ASSISTANT.value,
                content=assistant_text,
            )
        )
        await db.commit()
        logger.debug("Chat turn stored for session %s mode %s", session_id, mode)

    async def get_history(
        self,
        db: AsyncSession,
        session_id: str,
        limit: int = 20,
        mode: str | None = None,
    ) -> list[ChatMessageRead]:
        """Return the newest `limit` messages, oldest first."""
        query = select(ChatMessage).where(ChatMessage.session_id == session_id)
        if mode:
            query = query.where(ChatMessage.mode == mode)
        query = query.order_by(ChatMessage.timestamp.desc(), ChatMessage.id.desc()).limit(limit)

        result = await db.execute(query)
        messages = [ChatMessageRead.model_validate(m) for m in result.scalars().all()]
        messages.reverse()
        return messages


# Singleton instance
chat_history = ChatHistory()
