"""
Event Finance Manager - Notification Service

In-app notifications for budget alerts, new expenses awaiting approval and
expense decisions.
"""

import uuid
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.config import Settings, get_settings
from eventfinance.models.activity import Notification, NotificationType
from eventfinance.models.user import User, UserRole

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for creating and reading notifications."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    async def create_notification(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Create a notification inside the caller's transaction."""
        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            extra=metadata,
            is_read=False,
        )
        self.db.add(notification)
        await self.db.flush()

        logger.info(f"Notification created for user {user_id}: {title}")
        return notification

    async def notify_users(
        self,
        user_ids: Iterable[Optional[uuid.UUID]],
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[Notification]:
        """Notify each distinct user once; None ids are skipped."""
        seen = set()
        created = []
        for user_id in user_ids:
            if user_id is None or user_id in seen:
                continue
            seen.add(user_id)
            created.append(
                await self.create_notification(
                    user_id=user_id,
                    title=title,
                    message=message,
                    notification_type=notification_type,
                    metadata=metadata,
                )
            )
        return created

    async def get_finance_recipients(self, organization_id: uuid.UUID) -> List[uuid.UUID]:
        """Active Admin and Finance users of an organization."""
        result = await self.db.execute(
            select(User.id)
            .where(User.organization_id == organization_id)
            .where(User.is_active.is_(True))
            .where(User.role.in_([UserRole.ADMIN, UserRole.FINANCE]))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def get_approver_recipients(self, organization_id: uuid.UUID) -> List[uuid.UUID]:
        """Active users whose role may approve expenses."""
        allowed = set(self.settings.expense_approve_roles_list)
        roles = [role for role in UserRole if role.value.lower() in allowed]
        if not roles:
            return []
        result = await self.db.execute(
            select(User.id)
            .where(User.organization_id == organization_id)
            .where(User.is_active.is_(True))
            .where(User.role.in_(roles))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def get_user_notifications(
        self,
        user_id: uuid.UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_all_as_read(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount
