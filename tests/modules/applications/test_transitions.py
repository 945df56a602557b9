"""
Unit tests for the status state machine and notification rules.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from app.modules.applications.models import ApplicationStatus
from app.modules.applications.transitions import (
    NOTIFICATION_RULES,
    Audience,
    TransitionEvent,
    is_transition_allowed,
    stamp_transition,
)
from app.modules.notifications.models import NotificationType


class TestIsTransitionAllowed:
    """Tests for transition legality per role."""

    def test_student_may_submit_draft(self, student):
        assert is_transition_allowed(student, ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED)

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (ApplicationStatus.DRAFT, ApplicationStatus.APPROVED),
            (ApplicationStatus.SUBMITTED, ApplicationStatus.DRAFT),
            (ApplicationStatus.REJECTED, ApplicationStatus.SUBMITTED),
            (ApplicationStatus.SUBMITTED, ApplicationStatus.CANCELLED),
        ],
    )
    def test_student_may_not_make_other_moves(self, student, from_status, to_status):
        assert not is_transition_allowed(student, from_status, to_status)

    @pytest.mark.parametrize("to_status", list(ApplicationStatus))
    def test_staff_may_move_to_any_other_status(self, admin, program_admin, to_status):
        from_status = ApplicationStatus.UNDER_REVIEW
        expected = to_status != from_status
        assert is_transition_allowed(admin, from_status, to_status) is expected
        assert is_transition_allowed(program_admin, from_status, to_status) is expected


class TestStampTransition:
    """Tests for one-shot timestamps."""

    def test_first_submit_sets_submitted_at(self, sample_application_model):
        now = datetime.now(UTC)
        stamp_transition(sample_application_model, ApplicationStatus.SUBMITTED, uuid4(), now)
        assert sample_application_model.submitted_at == now

    def test_resubmit_keeps_original_submitted_at(self, sample_application_model):
        first = datetime.now(UTC) - timedelta(days=3)
        sample_application_model.submitted_at = first

        stamp_transition(
            sample_application_model, ApplicationStatus.SUBMITTED, uuid4(), datetime.now(UTC)
        )

        assert sample_application_model.submitted_at == first

    def test_first_review_sets_reviewer(self, sample_application_model):
        reviewer = uuid4()
        now = datetime.now(UTC)

        stamp_transition(sample_application_model, ApplicationStatus.REJECTED, reviewer, now)

        assert sample_application_model.reviewed_by == reviewer
        assert sample_application_model.reviewed_at == now

    def test_second_review_keeps_first_reviewer(self, sample_application_model):
        first_reviewer = uuid4()
        first_at = datetime.now(UTC) - timedelta(days=1)
        sample_application_model.reviewed_by = first_reviewer
        sample_application_model.reviewed_at = first_at

        stamp_transition(
            sample_application_model, ApplicationStatus.APPROVED, uuid4(), datetime.now(UTC)
        )

        assert sample_application_model.reviewed_by == first_reviewer
        assert sample_application_model.reviewed_at == first_at

    def test_other_statuses_stamp_nothing(self, sample_application_model):
        stamp_transition(
            sample_application_model, ApplicationStatus.FROZEN, uuid4(), datetime.now(UTC)
        )
        assert sample_application_model.submitted_at is None
        assert sample_application_model.reviewed_at is None


class TestNotificationRules:
    """Tests for the event -> audience table."""

    def test_every_event_has_a_rule(self):
        assert set(NOTIFICATION_RULES) == set(TransitionEvent)

    def test_audiences(self):
        assert NOTIFICATION_RULES[TransitionEvent.CREATED].audience == Audience.OWNER
        assert NOTIFICATION_RULES[TransitionEvent.SUBMITTED].audience == Audience.PROGRAM_ADMINS
        assert NOTIFICATION_RULES[TransitionEvent.STATUS_CHANGED].audience == Audience.OWNER

    def test_created_message(self, sample_application_model):
        text = NOTIFICATION_RULES[TransitionEvent.CREATED].render(sample_application_model)
        assert text == (
            "Your application #APP25000001 has been created successfully. "
            "Please complete and submit it."
        )

    def test_submitted_message_names_program(self, sample_application_model):
        text = NOTIFICATION_RULES[TransitionEvent.SUBMITTED].render(
            sample_application_model, "B.Sc. Computer Science"
        )
        assert "#APP25000001 for B.Sc. Computer Science" in text

    def test_status_changed_message_and_type(self, sample_application_model):
        rule = NOTIFICATION_RULES[TransitionEvent.STATUS_CHANGED]
        sample_application_model.status = ApplicationStatus.UNDER_REVIEW

        assert rule.render(sample_application_model) == (
            "Your application #APP25000001 status has been changed to UNDER_REVIEW."
        )
        assert rule.notification_type(ApplicationStatus.APPROVED) == NotificationType.SUCCESS
        assert rule.notification_type(ApplicationStatus.REJECTED) == NotificationType.DANGER
        assert rule.notification_type(ApplicationStatus.FROZEN) == NotificationType.INFO
