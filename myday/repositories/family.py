from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, update, func

from myday.models import (
    Family,
    FamilyMember,
    FamilyInvitation,
    TaskAssignment,
    SharedTask,
    Notification,
    InvitationStatusEnum,
)
from myday.schemas import (
    FamilyOut,
    FamilyMemberOut,
    InvitationOut,
    AssignmentOut,
    SharedTaskOut,
    NotificationOut,
)
from .base import BaseRepository


class FamilyRepository(BaseRepository[Family, FamilyOut]):
    id_prefix = "family"
    schema = FamilyOut

    def __init__(self, db: Session):
        super().__init__(db, Family)

    def create(self, name: str, description: Optional[str], created_by: str) -> Family:
        family = Family(id=self._gen_id(), name=name, description=description, created_by=created_by)
        self.db.add(family)
        self.db.flush()
        self.db.refresh(family)
        return family

    def list_for_member(self, user_id: str) -> List[Family]:
        return list(self.db.execute(
            select(Family)
            .join(FamilyMember, FamilyMember.family_id == Family.id)
            .where(FamilyMember.user_id == user_id)
            .order_by(Family.created_at.asc())
        ).scalars().all())


class FamilyMemberRepository(BaseRepository[FamilyMember, FamilyMemberOut]):
    id_prefix = "member"
    schema = FamilyMemberOut

    def __init__(self, db: Session):
        super().__init__(db, FamilyMember)

    def add(self, family_id: str, user_id: str, role) -> FamilyMember:
        member = FamilyMember(id=self._gen_id(), family_id=family_id, user_id=user_id, role=role)
        self.db.add(member)
        self.db.flush()
        self.db.refresh(member)
        return member

    def get_membership(self, family_id: str, user_id: str) -> Optional[FamilyMember]:
        return self.db.execute(
            select(FamilyMember).where(
                FamilyMember.family_id == family_id,
                FamilyMember.user_id == user_id,
            )
        ).scalar_one_or_none()

    def list_members(self, family_id: str) -> List[FamilyMember]:
        return list(self.db.execute(
            select(FamilyMember)
            .where(FamilyMember.family_id == family_id)
            .order_by(FamilyMember.joined_at.asc())
        ).scalars().all())

    def to_schema(self, member: FamilyMember) -> FamilyMemberOut:
        out = FamilyMemberOut.model_validate(member)
        if member.user is not None:
            out.email = member.user.email
            out.display_name = member.user.username or member.user.name
        return out


class InvitationRepository(BaseRepository[FamilyInvitation, InvitationOut]):
    id_prefix = "invite"
    schema = InvitationOut

    def __init__(self, db: Session):
        super().__init__(db, FamilyInvitation)

    def create(self, **values) -> FamilyInvitation:
        invitation = FamilyInvitation(id=self._gen_id(), **values)
        self.db.add(invitation)
        self.db.flush()
        self.db.refresh(invitation)
        return invitation

    def find_pending(self, family_id: str, email: str) -> Optional[FamilyInvitation]:
        return self.db.execute(
            select(FamilyInvitation).where(
                FamilyInvitation.family_id == family_id,
                func.lower(FamilyInvitation.invited_email) == email.lower(),
                FamilyInvitation.status == InvitationStatusEnum.pending,
            )
        ).scalars().first()

    def list_pending_for(self, user_id: str, email: str, now: datetime) -> List[FamilyInvitation]:
        return list(self.db.execute(
            select(FamilyInvitation).where(
                (FamilyInvitation.invited_user_id == user_id)
                | (func.lower(FamilyInvitation.invited_email) == email.lower()),
                FamilyInvitation.status == InvitationStatusEnum.pending,
                FamilyInvitation.expires_at > now,
            ).order_by(FamilyInvitation.created_at.desc())
        ).scalars().all())

    def to_schema(self, invitation: FamilyInvitation) -> InvitationOut:
        out = InvitationOut.model_validate(invitation)
        if invitation.family is not None:
            out.family_name = invitation.family.name
        return out


class AssignmentRepository(BaseRepository[TaskAssignment, AssignmentOut]):
    id_prefix = "assignment"
    schema = AssignmentOut

    def __init__(self, db: Session):
        super().__init__(db, TaskAssignment)

    def create(self, **values) -> TaskAssignment:
        assignment = TaskAssignment(id=self._gen_id(), **values)
        self.db.add(assignment)
        self.db.flush()
        self.db.refresh(assignment)
        return assignment

    def list_assigned_to(self, user_id: str, statuses) -> List[TaskAssignment]:
        return list(self.db.execute(
            select(TaskAssignment).where(
                TaskAssignment.assigned_to == user_id,
                TaskAssignment.status.in_(statuses),
            ).order_by(TaskAssignment.created_at.desc())
        ).scalars().all())

    def list_assigned_by(self, user_id: str) -> List[TaskAssignment]:
        return list(self.db.execute(
            select(TaskAssignment)
            .where(TaskAssignment.assigned_by == user_id)
            .order_by(TaskAssignment.created_at.desc())
        ).scalars().all())

    def to_schema(self, assignment: TaskAssignment) -> AssignmentOut:
        out = AssignmentOut.model_validate(assignment)
        if assignment.task is not None:
            out.task_name = assignment.task.name
        return out


class SharedTaskRepository(BaseRepository[SharedTask, SharedTaskOut]):
    id_prefix = "share"
    schema = SharedTaskOut

    def __init__(self, db: Session):
        super().__init__(db, SharedTask)

    def create(self, **values) -> SharedTask:
        shared = SharedTask(id=self._gen_id(), **values)
        self.db.add(shared)
        self.db.flush()
        self.db.refresh(shared)
        return shared

    def list_visible_to(self, user_id: str, family_ids: List[str]) -> List[SharedTask]:
        if not family_ids:
            return []
        return list(self.db.execute(
            select(SharedTask).where(
                SharedTask.family_id.in_(family_ids),
                SharedTask.shared_by != user_id,
                (SharedTask.shared_with == user_id) | (SharedTask.shared_with.is_(None)),
            ).order_by(SharedTask.created_at.desc())
        ).scalars().all())

    def to_schema(self, shared: SharedTask) -> SharedTaskOut:
        out = SharedTaskOut.model_validate(shared)
        if shared.task is not None:
            out.task_name = shared.task.name
        return out


class NotificationRepository(BaseRepository[Notification, NotificationOut]):
    id_prefix = "notification"
    schema = NotificationOut

    def __init__(self, db: Session):
        super().__init__(db, Notification)

    def list_by_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.read.is_(False))
        return list(self.db.execute(query.order_by(Notification.created_at.desc())).scalars().all())

    def mark_all_read(self, user_id: str) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        return result.rowcount or 0

    def unread_count(self, user_id: str) -> int:
        return self.db.execute(
            select(func.count()).select_from(Notification).where(
                Notification.user_id == user_id,
                Notification.read.is_(False),
            )
        ).scalar_one()
