import pytest

from myday.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from myday.models import AssignmentStatusEnum, FamilyRoleEnum, NotificationTypeEnum, User
from myday.schemas import (
    AssignmentCreate,
    FamilyCreate,
    InvitationCreate,
    ShareCreate,
    TaskCreate,
)
from myday.services import FamilyService, NotificationService, SharingService, TaskService


@pytest.fixture
def family_service(test_db):
    return FamilyService(test_db)


@pytest.fixture
def family(family_service, users):
    """Alice's family with Bob as an accepted member."""
    alice, bob = users
    data = family_service.create_family(FamilyCreate(name="The Smiths"), alice.id)
    invitation = family_service.invite_member(data.family.id, InvitationCreate(email=bob.email), alice.id)
    family_service.respond_to_invitation(invitation.id, True, bob.id)
    return data.family


class TestFamilyService:
    """Test families, memberships and invitations."""

    def test_creator_is_admin(self, family_service, users):
        alice, _ = users
        data = family_service.create_family(FamilyCreate(name=" Home ", description="us"), alice.id)

        assert data.family.name == "Home"
        assert data.my_role == FamilyRoleEnum.admin
        assert [m.user_id for m in data.members] == [alice.id]

    def test_empty_name(self, family_service, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            family_service.create_family(FamilyCreate(name=" "), alice.id)

    def test_invitation_notifies_existing_user(self, family_service, test_db, users):
        alice, bob = users
        data = family_service.create_family(FamilyCreate(name="Home"), alice.id)

        invitation = family_service.invite_member(
            data.family.id, InvitationCreate(email="BOB@example.com", message="Join us"), alice.id
        )

        assert invitation.invited_email == "bob@example.com"
        assert invitation.invited_user_id == bob.id
        assert invitation.inviter_email == alice.email
        assert [i.id for i in family_service.list_my_invitations(bob.id)] == [invitation.id]
        notifications = NotificationService(test_db).list_notifications(bob.id)
        assert [n.type for n in notifications] == [NotificationTypeEnum.invitation]

    def test_duplicate_invitation_and_member_conflict(self, family_service, family, users):
        alice, bob = users
        with pytest.raises(ConflictError):
            family_service.invite_member(family.id, InvitationCreate(email=bob.email), alice.id)

        family_service.invite_member(family.id, InvitationCreate(email="carol@example.com"), alice.id)
        with pytest.raises(ConflictError):
            family_service.invite_member(family.id, InvitationCreate(email="carol@example.com"), alice.id)

    def test_accept_adds_member(self, family_service, family, users):
        _, bob = users
        data = family_service.get_family(family.id, bob.id)

        assert data.my_role == FamilyRoleEnum.member
        assert len(data.members) == 2
        assert [f.family.id for f in family_service.list_my_families(bob.id)] == [family.id]

    def test_respond_twice(self, family_service, users):
        alice, bob = users
        data = family_service.create_family(FamilyCreate(name="Home"), alice.id)
        invitation = family_service.invite_member(data.family.id, InvitationCreate(email=bob.email), alice.id)

        declined = family_service.respond_to_invitation(invitation.id, False, bob.id)
        assert declined.status.value == "rejected"
        with pytest.raises(ValidationError):
            family_service.respond_to_invitation(invitation.id, True, bob.id)
        with pytest.raises(NotFoundError):
            family_service.get_family(data.family.id, bob.id)

    def test_invitation_for_someone_else(self, family_service, test_db, users):
        alice, bob = users
        data = family_service.create_family(FamilyCreate(name="Home"), alice.id)
        invitation = family_service.invite_member(
            data.family.id, InvitationCreate(email="carol@example.com"), alice.id
        )

        with pytest.raises(NotFoundError):
            family_service.respond_to_invitation(invitation.id, True, bob.id)

    def test_cancel_invitation(self, family_service, users):
        alice, _ = users
        data = family_service.create_family(FamilyCreate(name="Home"), alice.id)
        invitation = family_service.invite_member(
            data.family.id, InvitationCreate(email="carol@example.com"), alice.id
        )

        cancelled = family_service.cancel_invitation(invitation.id, alice.id)

        assert cancelled.status.value == "cancelled"
        assert family_service.list_family_invitations(data.family.id, alice.id) == []

    def test_non_member_sees_not_found(self, family_service, users):
        alice, bob = users
        data = family_service.create_family(FamilyCreate(name="Private"), alice.id)

        with pytest.raises(NotFoundError):
            family_service.get_family(data.family.id, bob.id)

    def test_member_cannot_administer(self, family_service, family, users):
        _, bob = users
        with pytest.raises(PermissionDeniedError):
            family_service.update_family(family.id, bob.id, {"name": "Bob's now"})
        with pytest.raises(PermissionDeniedError):
            family_service.invite_member(family.id, InvitationCreate(email="carol@example.com"), bob.id)
        with pytest.raises(PermissionDeniedError):
            family_service.delete_family(family.id, bob.id)

    def test_last_admin_cannot_leave(self, family_service, family, users):
        alice, bob = users
        with pytest.raises(ValidationError):
            family_service.leave_family(family.id, alice.id)

        assert family_service.leave_family(family.id, bob.id) is True
        assert family_service.list_my_families(bob.id) == []

    def test_delete_family(self, family_service, family, users):
        alice, bob = users
        assert family_service.delete_family(family.id, alice.id) is True
        assert family_service.list_my_families(alice.id) == []
        assert family_service.list_my_families(bob.id) == []


class TestSharingService:
    """Test task assignments, shares and their notifications."""

    def test_assign_and_complete(self, test_db, family, users):
        alice, bob = users
        task = TaskService(test_db).create_task(TaskCreate(name="Take out bins"), alice.id)
        sharing = SharingService(test_db)
        notifications = NotificationService(test_db)

        assignment = sharing.assign_task(
            AssignmentCreate(task_id=task.id, assigned_to=bob.id, family_id=family.id), alice.id
        )
        assert assignment.status == AssignmentStatusEnum.pending
        assert [a.id for a in sharing.my_assigned_tasks(bob.id)] == [assignment.id]
        assert [a.id for a in sharing.tasks_i_assigned(alice.id)] == [assignment.id]
        assert NotificationTypeEnum.task_assigned in [n.type for n in notifications.list_notifications(bob.id)]

        with pytest.raises(PermissionDeniedError):
            sharing.update_assignment_status(assignment.id, AssignmentStatusEnum.completed, alice.id)

        done = sharing.update_assignment_status(assignment.id, AssignmentStatusEnum.completed, bob.id)
        assert done.status == AssignmentStatusEnum.completed
        assert sharing.my_assigned_tasks(bob.id) == []
        assert NotificationTypeEnum.task_completed in [
            n.type for n in notifications.list_notifications(alice.id)
        ]

    def test_assign_to_non_member(self, test_db, users):
        alice, bob = users
        family = FamilyService(test_db).create_family(FamilyCreate(name="Solo"), alice.id).family
        task = TaskService(test_db).create_task(TaskCreate(name="Laundry"), alice.id)

        with pytest.raises(ValidationError):
            SharingService(test_db).assign_task(
                AssignmentCreate(task_id=task.id, assigned_to=bob.id, family_id=family.id), alice.id
            )

    def test_only_own_tasks_can_be_assigned(self, test_db, family, users):
        alice, bob = users
        bobs_task = TaskService(test_db).create_task(TaskCreate(name="Bob's chore"), bob.id)

        with pytest.raises(NotFoundError):
            SharingService(test_db).assign_task(
                AssignmentCreate(task_id=bobs_task.id, assigned_to=bob.id, family_id=family.id), alice.id
            )

    def test_share_with_whole_family(self, test_db, family, users):
        alice, bob = users
        carol = User(id="user_carol", email="carol@example.com", name="Carol")
        test_db.add(carol)
        test_db.commit()
        task = TaskService(test_db).create_task(TaskCreate(name="Groceries"), alice.id)
        sharing = SharingService(test_db)

        shared = sharing.share_task(ShareCreate(task_id=task.id, family_id=family.id), alice.id)

        assert shared.shared_with is None
        assert shared.task_name == "Groceries"
        assert [s.id for s in sharing.shared_with_me(bob.id)] == [shared.id]
        assert sharing.shared_with_me(alice.id) == []
        assert sharing.shared_with_me(carol.id) == []

        with pytest.raises(NotFoundError):
            sharing.unshare_task(shared.id, bob.id)
        assert sharing.unshare_task(shared.id, alice.id) is True
        assert sharing.shared_with_me(bob.id) == []

    def test_share_with_self(self, test_db, family, users):
        alice, _ = users
        task = TaskService(test_db).create_task(TaskCreate(name="Groceries"), alice.id)

        with pytest.raises(ValidationError):
            SharingService(test_db).share_task(
                ShareCreate(task_id=task.id, family_id=family.id, shared_with=alice.id), alice.id
            )


class TestNotificationService:
    def test_read_state(self, test_db, family, users):
        alice, _ = users
        service = NotificationService(test_db)
        # Bob accepting the invitation notified Alice
        notifications = service.list_notifications(alice.id)
        assert len(notifications) == 1
        assert service.unread_count(alice.id) == 1

        service.mark_read(notifications[0].id, alice.id)
        assert service.unread_count(alice.id) == 0
        assert service.list_notifications(alice.id, unread_only=True) == []

        assert service.mark_all_read(alice.id) == 0
        assert service.delete_notification(notifications[0].id, alice.id) is True
        with pytest.raises(NotFoundError):
            service.delete_notification(notifications[0].id, alice.id)
