from datetime import datetime, timedelta
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import delete

from myday.core import settings
from myday.models import (
    FamilyRoleEnum,
    InvitationStatusEnum,
    AssignmentStatusEnum,
    NotificationTypeEnum,
    FamilyInvitation,
    SharedTask,
    TaskAssignment,
)
from myday.repositories import (
    FamilyRepository,
    FamilyMemberRepository,
    InvitationRepository,
    AssignmentRepository,
    SharedTaskRepository,
    NotificationRepository,
    TaskRepository,
    UserRepository,
)
from myday.schemas import (
    AssignmentCreate,
    AssignmentOut,
    FamilyCreate,
    FamilyDataOut,
    FamilyOut,
    InvitationCreate,
    InvitationOut,
    NotificationOut,
    ShareCreate,
    SharedTaskOut,
)
from myday.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from .base import BaseService


class NotificationService(BaseService):
    """In-app notifications produced by family activity."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.notification_repo = NotificationRepository(db)

    def notify(
        self,
        user_id: str,
        type: NotificationTypeEnum,
        title: str,
        message: str,
        link: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        """Queue a notification in the current transaction; the caller commits."""
        self.logger.debug(f"Notifying user {user_id}: {type.value}")
        return self.notification_repo.create_for_user(user_id, {
            "type": type,
            "title": title,
            "message": message,
            "link": link,
            "data": data,
            "read": False,
        })

    def list_notifications(self, user_id: str, unread_only: bool = False) -> List[NotificationOut]:
        return self.notification_repo.to_schema_batch(
            self.notification_repo.list_by_user(user_id, unread_only=unread_only)
        )

    def mark_read(self, notification_id: str, user_id: str) -> NotificationOut:
        try:
            notification = self.notification_repo.update_by_user(notification_id, user_id, {"read": True})
            if not notification:
                raise NotFoundError("Notification", notification_id)
            self.commit()
            return self.notification_repo.to_schema(notification)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to mark notification {notification_id} read: {str(e)}")
            raise

    def mark_all_read(self, user_id: str) -> int:
        try:
            count = self.notification_repo.mark_all_read(user_id)
            self.commit()
            self.logger.info(f"Marked {count} notifications read for user {user_id}")
            return count

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to mark notifications read: {str(e)}")
            raise

    def delete_notification(self, notification_id: str, user_id: str) -> bool:
        try:
            if not self.notification_repo.delete_by_user(notification_id, user_id):
                raise NotFoundError("Notification", notification_id)
            self.commit()
            return True

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete notification {notification_id}: {str(e)}")
            raise

    def unread_count(self, user_id: str) -> int:
        return self.notification_repo.unread_count(user_id)


class FamilyAccessMixin:
    """Membership checks shared by family and sharing services."""

    member_repo: FamilyMemberRepository

    def _require_member(self, family_id: str, user_id: str):
        membership = self.member_repo.get_membership(family_id, user_id)
        if not membership:
            # Non-members cannot tell a foreign family from a missing one
            raise NotFoundError("Family", family_id)
        return membership

    def _require_admin(self, family_id: str, user_id: str):
        membership = self._require_member(family_id, user_id)
        if membership.role != FamilyRoleEnum.admin:
            raise PermissionDeniedError("Only family admins can do this", {"family_id": family_id})
        return membership


class FamilyService(FamilyAccessMixin, BaseService):
    """Service for families, memberships and invitations."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.family_repo = FamilyRepository(db)
        self.member_repo = FamilyMemberRepository(db)
        self.invitation_repo = InvitationRepository(db)
        self.user_repo = UserRepository(db)
        self.notifications = NotificationService(db)

    def _family_data(self, family, user_id: str) -> FamilyDataOut:
        members = self.member_repo.list_members(family.id)
        my_role = next(m.role for m in members if m.user_id == user_id)
        return FamilyDataOut(
            family=self.family_repo.to_schema(family),
            members=self.member_repo.to_schema_batch(members),
            my_role=my_role,
        )

    def _invitation_out(self, invitation: FamilyInvitation) -> InvitationOut:
        out = self.invitation_repo.to_schema(invitation)
        inviter = self.user_repo.get(invitation.invited_by)
        out.inviter_email = inviter.email if inviter else None
        return out

    def create_family(self, family_in: FamilyCreate, user_id: str) -> FamilyDataOut:
        """Create a family with the caller as its first admin."""
        try:
            self.logger.info(f"Creating family for user {user_id}: {family_in.name}")

            name = (family_in.name or "").strip()
            if not name:
                raise ValidationError("Family name cannot be empty")

            family = self.family_repo.create(name, family_in.description, user_id)
            self.member_repo.add(family.id, user_id, FamilyRoleEnum.admin)
            self.commit()

            self.logger.info(f"Family created successfully: {family.id}")
            return self._family_data(family, user_id)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create family: {str(e)}")
            raise

    def list_my_families(self, user_id: str) -> List[FamilyDataOut]:
        self.logger.debug(f"Listing families for user {user_id}")
        return [self._family_data(f, user_id) for f in self.family_repo.list_for_member(user_id)]

    def get_family(self, family_id: str, user_id: str) -> FamilyDataOut:
        self._require_member(family_id, user_id)
        return self._family_data(self.family_repo.get(family_id), user_id)

    def update_family(self, family_id: str, user_id: str, update_data: Dict[str, Any]) -> FamilyOut:
        try:
            self.logger.info(f"Updating family {family_id} for user {user_id}")

            self._require_admin(family_id, user_id)
            family = self.family_repo.get(family_id)
            if "name" in update_data:
                name = (update_data["name"] or "").strip()
                if not name:
                    raise ValidationError("Family name cannot be empty")
                family.name = name
            if "description" in update_data:
                family.description = update_data["description"]
            family.updated_at = datetime.utcnow()
            self.db.flush()
            self.commit()

            return self.family_repo.to_schema(family)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update family {family_id}: {str(e)}")
            raise

    def delete_family(self, family_id: str, user_id: str) -> bool:
        """Delete a family with its members, invitations, assignments and shares."""
        try:
            self.logger.info(f"Deleting family {family_id} for user {user_id}")

            self._require_admin(family_id, user_id)
            self.db.execute(delete(TaskAssignment).where(TaskAssignment.family_id == family_id))
            self.db.execute(delete(SharedTask).where(SharedTask.family_id == family_id))
            self.db.delete(self.family_repo.get(family_id))
            self.db.flush()
            self.commit()

            self.logger.info(f"Family deleted successfully: {family_id}")
            return True

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete family {family_id}: {str(e)}")
            raise

    def leave_family(self, family_id: str, user_id: str) -> bool:
        try:
            self.logger.info(f"User {user_id} leaving family {family_id}")

            membership = self._require_member(family_id, user_id)
            if membership.role == FamilyRoleEnum.admin:
                admins = [
                    m for m in self.member_repo.list_members(family_id)
                    if m.role == FamilyRoleEnum.admin
                ]
                if len(admins) == 1:
                    raise ValidationError("The last admin cannot leave; delete the family instead")

            self.db.delete(membership)
            self.db.flush()
            self.commit()
            return True

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to leave family {family_id}: {str(e)}")
            raise

    def invite_member(self, family_id: str, invite_in: InvitationCreate, user_id: str) -> InvitationOut:
        """Invite someone by email; admins only."""
        try:
            email = (invite_in.email or "").strip().lower()
            self.logger.info(f"Inviting {email} to family {family_id} by user {user_id}")

            self._require_admin(family_id, user_id)
            if "@" not in email:
                raise ValidationError("A valid email address is required")

            invited_user = self.user_repo.get_by_email(email)
            if invited_user and self.member_repo.get_membership(family_id, invited_user.id):
                raise ConflictError(f"{email} is already a member of this family")
            if self.invitation_repo.find_pending(family_id, email):
                raise ConflictError(f"An invitation for {email} is already pending")

            invitation = self.invitation_repo.create(
                family_id=family_id,
                invited_by=user_id,
                invited_email=email,
                invited_user_id=invited_user.id if invited_user else None,
                status=InvitationStatusEnum.pending,
                message=invite_in.message,
                expires_at=datetime.utcnow() + timedelta(days=settings.invitation_expiry_days),
            )

            if invited_user:
                family = self.family_repo.get(family_id)
                self.notifications.notify(
                    invited_user.id,
                    NotificationTypeEnum.invitation,
                    "Family invitation",
                    f"You have been invited to join {family.name}",
                    data={"invitation_id": invitation.id, "family_id": family_id},
                )
            self.commit()

            self.logger.info(f"Invitation created successfully: {invitation.id}")
            return self._invitation_out(invitation)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to invite member: {str(e)}")
            raise

    def list_my_invitations(self, user_id: str) -> List[InvitationOut]:
        """Pending, unexpired invitations addressed to the caller."""
        user = self.user_repo.get(user_id)
        if not user:
            return []
        invitations = self.invitation_repo.list_pending_for(user_id, user.email, datetime.utcnow())
        return [self._invitation_out(i) for i in invitations]

    def list_family_invitations(self, family_id: str, user_id: str) -> List[InvitationOut]:
        self._require_member(family_id, user_id)
        family = self.family_repo.get(family_id)
        pending = [i for i in family.invitations if i.status == InvitationStatusEnum.pending]
        return [self._invitation_out(i) for i in pending]

    def respond_to_invitation(self, invitation_id: str, accept: bool, user_id: str) -> InvitationOut:
        try:
            self.logger.info(f"User {user_id} responding to invitation {invitation_id}: accept={accept}")

            invitation = self.invitation_repo.get(invitation_id)
            user = self.user_repo.get(user_id)
            addressed = invitation is not None and user is not None and (
                invitation.invited_user_id == user_id
                or invitation.invited_email.lower() == user.email.lower()
            )
            if not addressed:
                raise NotFoundError("Invitation", invitation_id)
            if invitation.status != InvitationStatusEnum.pending:
                raise ValidationError(f"Invitation is already {invitation.status.value}")
            if invitation.expires_at <= datetime.utcnow():
                raise ValidationError("Invitation has expired")

            invitation.invited_user_id = user_id
            if accept:
                invitation.status = InvitationStatusEnum.accepted
                if not self.member_repo.get_membership(invitation.family_id, user_id):
                    self.member_repo.add(invitation.family_id, user_id, FamilyRoleEnum.member)
                self.notifications.notify(
                    invitation.invited_by,
                    NotificationTypeEnum.family_update,
                    "Invitation accepted",
                    f"{user.email} joined {invitation.family.name}",
                    data={"family_id": invitation.family_id},
                )
            else:
                invitation.status = InvitationStatusEnum.rejected
            invitation.updated_at = datetime.utcnow()
            self.db.flush()
            self.commit()

            return self._invitation_out(invitation)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to respond to invitation {invitation_id}: {str(e)}")
            raise

    def cancel_invitation(self, invitation_id: str, user_id: str) -> InvitationOut:
        try:
            self.logger.info(f"Cancelling invitation {invitation_id} by user {user_id}")

            invitation = self.invitation_repo.get(invitation_id)
            if not invitation:
                raise NotFoundError("Invitation", invitation_id)
            if invitation.invited_by != user_id:
                self._require_admin(invitation.family_id, user_id)
            if invitation.status != InvitationStatusEnum.pending:
                raise ValidationError(f"Invitation is already {invitation.status.value}")

            invitation.status = InvitationStatusEnum.cancelled
            invitation.updated_at = datetime.utcnow()
            self.db.flush()
            self.commit()

            return self._invitation_out(invitation)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to cancel invitation {invitation_id}: {str(e)}")
            raise


class SharingService(FamilyAccessMixin, BaseService):
    """Service for assigning and sharing tasks inside a family."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.member_repo = FamilyMemberRepository(db)
        self.family_repo = FamilyRepository(db)
        self.assignment_repo = AssignmentRepository(db)
        self.shared_repo = SharedTaskRepository(db)
        self.task_repo = TaskRepository(db)
        self.user_repo = UserRepository(db)
        self.notifications = NotificationService(db)

    def _require_owned_task(self, task_id: str, user_id: str):
        task = self.task_repo.get_by_user(task_id, user_id)
        if not task:
            raise NotFoundError("Task", task_id)
        return task

    def _display_name(self, user_id: str) -> str:
        user = self.user_repo.get(user_id)
        if not user:
            return "Someone"
        return user.username or user.name or user.email

    def assign_task(self, assignment_in: AssignmentCreate, user_id: str) -> AssignmentOut:
        """Assign one of the caller's tasks to another family member."""
        try:
            self.logger.info(
                f"Assigning task {assignment_in.task_id} to {assignment_in.assigned_to} "
                f"in family {assignment_in.family_id}"
            )

            self._require_member(assignment_in.family_id, user_id)
            if not self.member_repo.get_membership(assignment_in.family_id, assignment_in.assigned_to):
                raise ValidationError("Tasks can only be assigned to family members")
            task = self._require_owned_task(assignment_in.task_id, user_id)

            assignment = self.assignment_repo.create(
                task_id=task.id,
                assigned_by=user_id,
                assigned_to=assignment_in.assigned_to,
                family_id=assignment_in.family_id,
                due_date=assignment_in.due_date,
                priority=assignment_in.priority,
                status=AssignmentStatusEnum.pending,
                notes=assignment_in.notes,
            )
            self.notifications.notify(
                assignment_in.assigned_to,
                NotificationTypeEnum.task_assigned,
                "New task assigned",
                f"{self._display_name(user_id)} assigned you \"{task.name}\"",
                data={"assignment_id": assignment.id, "task_id": task.id},
            )
            self.commit()

            self.logger.info(f"Task assigned successfully: {assignment.id}")
            return self.assignment_repo.to_schema(assignment)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to assign task: {str(e)}")
            raise

    def my_assigned_tasks(self, user_id: str) -> List[AssignmentOut]:
        """Open assignments for the caller (pending and accepted)."""
        return self.assignment_repo.to_schema_batch(self.assignment_repo.list_assigned_to(
            user_id,
            [AssignmentStatusEnum.pending, AssignmentStatusEnum.accepted],
        ))

    def tasks_i_assigned(self, user_id: str) -> List[AssignmentOut]:
        return self.assignment_repo.to_schema_batch(self.assignment_repo.list_assigned_by(user_id))

    def update_assignment_status(
        self,
        assignment_id: str,
        status: AssignmentStatusEnum,
        user_id: str,
    ) -> AssignmentOut:
        try:
            self.logger.info(f"Updating assignment {assignment_id} to {status.value} by user {user_id}")

            assignment = self.assignment_repo.get(assignment_id)
            if not assignment or user_id not in (assignment.assigned_to, assignment.assigned_by):
                raise NotFoundError("TaskAssignment", assignment_id)
            if assignment.assigned_to != user_id:
                raise PermissionDeniedError("Only the assignee can change the assignment status")

            assignment.status = status
            assignment.updated_at = datetime.utcnow()
            if status == AssignmentStatusEnum.completed:
                self.notifications.notify(
                    assignment.assigned_by,
                    NotificationTypeEnum.task_completed,
                    "Assigned task completed",
                    f"{self._display_name(user_id)} completed \"{assignment.task.name}\"",
                    data={"assignment_id": assignment.id, "task_id": assignment.task_id},
                )
            self.db.flush()
            self.commit()

            return self.assignment_repo.to_schema(assignment)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update assignment {assignment_id}: {str(e)}")
            raise

    def share_task(self, share_in: ShareCreate, user_id: str) -> SharedTaskOut:
        """Share a task with one member, or with the whole family when no member is named."""
        try:
            self.logger.info(f"Sharing task {share_in.task_id} in family {share_in.family_id}")

            self._require_member(share_in.family_id, user_id)
            task = self._require_owned_task(share_in.task_id, user_id)
            if share_in.shared_with:
                if share_in.shared_with == user_id:
                    raise ValidationError("A task cannot be shared with yourself")
                if not self.member_repo.get_membership(share_in.family_id, share_in.shared_with):
                    raise ValidationError("Tasks can only be shared with family members")
                recipients = [share_in.shared_with]
            else:
                recipients = [
                    m.user_id for m in self.member_repo.list_members(share_in.family_id)
                    if m.user_id != user_id
                ]

            shared = self.shared_repo.create(
                task_id=task.id,
                shared_by=user_id,
                shared_with=share_in.shared_with,
                family_id=share_in.family_id,
                permission=share_in.permission,
            )
            sharer = self._display_name(user_id)
            for recipient in recipients:
                self.notifications.notify(
                    recipient,
                    NotificationTypeEnum.task_shared,
                    "Task shared with you",
                    f"{sharer} shared \"{task.name}\"",
                    data={"shared_task_id": shared.id, "task_id": task.id},
                )
            self.commit()

            return self.shared_repo.to_schema(shared)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to share task: {str(e)}")
            raise

    def shared_with_me(self, user_id: str) -> List[SharedTaskOut]:
        family_ids = [f.id for f in self.family_repo.list_for_member(user_id)]
        return self.shared_repo.to_schema_batch(self.shared_repo.list_visible_to(user_id, family_ids))

    def unshare_task(self, shared_task_id: str, user_id: str) -> bool:
        try:
            self.logger.info(f"Removing share {shared_task_id} by user {user_id}")

            shared = self.shared_repo.get(shared_task_id)
            if not shared or shared.shared_by != user_id:
                raise NotFoundError("SharedTask", shared_task_id)
            self.db.delete(shared)
            self.db.flush()
            self.commit()
            return True

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to unshare task {shared_task_id}: {str(e)}")
            raise
