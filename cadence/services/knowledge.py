"""
Knowledge base aggregation.

One entry per (course_code, topic) per session, derived from logged study
sessions: each session on the topic bumps study_count and last_studied, and
may replace the proficiency level and notes.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models import KnowledgeEntry
from cadence.schemas.courses import KnowledgeEntryRead

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Distinguishes "notes not supplied" from an explicit None
UNSET = _Unset()


class KnowledgeAggregator:
    """Maintains knowledge base entries from study activity."""

    async def upsert(
        self,
        db: AsyncSession,
        session_id: str,
        course_code: str,
        topic: str,
        proficiency_level: str | None = None,
        notes: str | None | _Unset = UNSET,
    ) -> KnowledgeEntryRead:
        """
        Create or bump the entry for (course_code, topic).

        Existing rows: study_count += 1, last_studied = now, proficiency_level
        replaced only when one is given, notes replaced whenever supplied.
        New rows start at study_count 1 with proficiency "beginner" unless one
        is given.
        """
        now = datetime.now(timezone.utc)
        result = await db.execute(
            select(KnowledgeEntry)
            .where(
                KnowledgeEntry.session_id == session_id,
                KnowledgeEntry.course_code == course_code,
                KnowledgeEntry.topic == topic,
            )
            .order_by(KnowledgeEntry.id.asc())
            .execution_options(populate_existing=True)
        )
        entries = list(result.scalars().all())

        if entries:
            # Subtopic rows for the same topic are bumped together
            for entry in entries:
                if proficiency_level is not None:
                    entry.proficiency_level = proficiency_level
                if notes is not UNSET:
                    entry.notes = notes
                entry.study_count = entry.study_count + 1
                entry.last_studied = now
                entry.updated_at = now
            entry = entries[0]
        else:
            entry = KnowledgeEntry(
                session_id=session_id,
                course_code=course_code,
                topic=topic,
                proficiency_level=proficiency_level or "beginner",
                notes=None if notes is UNSET else notes,
                study_count=1,
                last_studied=now,
            )
            db.add(entry)

        await db.commit()
        await db.refresh(entry)
        logger.debug(
            "Knowledge entry %s/%s at study_count=%d for session %s",
            course_code, topic, entry.study_count, session_id,
        )
        return KnowledgeEntryRead.model_validate(entry)

    async def get_knowledge_base(
        self,
        db: AsyncSession,
        session_id: str,
        course_code: str | None = None,
    ) -> list[KnowledgeEntryRead]:
        """List entries, most recently studied first."""
        query = select(KnowledgeEntry).where(KnowledgeEntry.session_id == session_id)
        if course_code:
            query = query.where(KnowledgeEntry.course_code == course_code)
        query = query.order_by(
            KnowledgeEntry.last_studied.desc().nullslast(),
            KnowledgeEntry.id.desc(),
        ).execution_options(populate_existing=True)

        result = await db.execute(query)
        return [KnowledgeEntryRead.model_validate(e) for e in result.scalars().all()]


# Singleton instance
knowledge_aggregator = KnowledgeAggregator()
