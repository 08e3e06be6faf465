"""Tests for the task lifecycle engine."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from taskpay.domain import (
    ActorContext,
    AuthorizationError,
    ClaimTask,
    ConfirmTask,
    CreateTask,
    DeclineTask,
    DeleteTask,
    EditTask,
    IllegalTransitionError,
    NotFoundError,
    PaymentMethod,
    PaymentStatus,
    SubmitProof,
    SubTaskDraft,
    TaskStatus,
    UserRole,
    ValidationError,
)
from taskpay.persistence import demo_snapshot
from taskpay.persistence.fixtures import ADMIN_ID
from taskpay.services.task_engine import (
    CASH_ON_HAND,
    TaskEngine,
    assigned_tasks,
    available_tasks,
    paid_tasks,
    tasks_awaiting_confirmation,
    to_money,
)

from factories import NOW, make_task, with_collections


@pytest.fixture
def engine(id_factory) -> TaskEngine:
    return TaskEngine(id_factory)


def run(engine, ctx, command, snapshot):
    """Handle a command that is expected to succeed."""
    result = engine.handle(ctx, command, snapshot)
    assert result.ok, result
    return result.value


def fail(engine, ctx, command, snapshot):
    """Handle a command that is expected to fail; return the error."""
    result = engine.handle(ctx, command, snapshot)
    assert not result.ok
    return result.error


def put(snapshot, task):
    """Snapshot with ``task`` replacing any task of the same id."""
    tasks = [t for t in snapshot.tasks if t.id != task.id]
    return with_collections(snapshot, tasks=[*tasks, task])


class TestTaskLifecycleScenario:
    """Create, claim, submit and confirm a cash task end to end."""

    def test_full_lifecycle(self, engine, admin_ctx, employee_ctx, base_snapshot):
        snapshot = with_collections(base_snapshot, tasks=[])

        created = run(
            engine,
            admin_ctx,
            CreateTask(
                title="Inventory",
                amount=Decimal("150"),
                location="Site A",
                scheduled_date=NOW,
                payment_method=PaymentMethod.CASH,
            ),
            snapshot,
        ).task
        assert created.status == TaskStatus.OPEN
        assert created.assigned_to is None
        assert created.created_by == admin_ctx.user_id
        snapshot = put(snapshot, created)

        claimed = run(engine, employee_ctx, ClaimTask(created.id), snapshot).task
        assert claimed.status == TaskStatus.IN_PROGRESS
        assert claimed.assigned_to == employee_ctx.user_id
        snapshot = put(snapshot, claimed)

        done = run(engine, employee_ctx, SubmitProof(created.id, "p.jpg", True), snapshot).task
        assert done.status == TaskStatus.DONE
        assert done.completion_photo == "p.jpg"
        assert done.completion_location_verified is True
        snapshot = put(snapshot, done)

        outcome = run(engine, admin_ctx, ConfirmTask(created.id), snapshot)
        assert outcome.task.status == TaskStatus.PAID
        payment = outcome.payment_request
        assert payment.amount == Decimal("150")
        assert payment.status == PaymentStatus.PAID
        assert payment.task_id == created.id
        assert payment.employee_id == employee_ctx.user_id
        assert payment.payment_details_snapshot == CASH_ON_HAND
        assert payment.paid_at == NOW


class TestDeclineAndResubmit:
    def test_decline_clears_proof_and_resubmit_clears_reason(
        self, engine, admin_ctx, employee_ctx, base_snapshot
    ):
        task = make_task(
            status=TaskStatus.DONE,
            assigned_to=employee_ctx.user_id,
            completion_photo="p.jpg",
            completion_location_verified=True,
        )
        snapshot = put(base_snapshot, task)

        declined = run(engine, admin_ctx, DeclineTask(task.id, "blurry photo"), snapshot).task
        assert declined.status == TaskStatus.IN_PROGRESS
        assert declined.completion_photo is None
        assert declined.completion_location_verified is False
        assert declined.rejection_reason == "blurry photo"
        assert declined.assigned_to == employee_ctx.user_id

        snapshot = put(snapshot, declined)
        resubmitted = run(
            engine, employee_ctx, SubmitProof(task.id, "p2.jpg", True), snapshot
        ).task
        assert resubmitted.status == TaskStatus.DONE
        assert resubmitted.completion_photo == "p2.jpg"
        assert resubmitted.rejection_reason is None

    def test_decline_requires_reason(self, engine, admin_ctx, base_snapshot):
        task = make_task(status=TaskStatus.DONE, assigned_to="2")
        error = fail(engine, admin_ctx, DeclineTask(task.id, "   "), put(base_snapshot, task))
        assert isinstance(error, ValidationError)
        assert error.fields == ("reason",)

    @pytest.mark.parametrize("status", [TaskStatus.OPEN, TaskStatus.IN_PROGRESS, TaskStatus.PAID])
    def test_decline_only_from_done(self, engine, admin_ctx, base_snapshot, status):
        task = make_task(status=status, assigned_to="2" if status != TaskStatus.OPEN else None)
        error = fail(engine, admin_ctx, DeclineTask(task.id, "no"), put(base_snapshot, task))
        assert isinstance(error, IllegalTransitionError)


class TestCreateTask:
    def test_missing_fields_are_all_named(self, engine, admin_ctx, base_snapshot):
        error = fail(
            engine,
            admin_ctx,
            CreateTask(title=" ", location="", scheduled_date=NOW, amount=None),
            base_snapshot,
        )
        assert isinstance(error, ValidationError)
        assert error.fields == ("title", "location", "amount")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), "abc", float("nan")])
    def test_single_task_needs_positive_amount(self, engine, admin_ctx, base_snapshot, amount):
        error = fail(
            engine,
            admin_ctx,
            CreateTask(title="Sweep", location="Site B", scheduled_date=NOW, amount=amount),
            base_snapshot,
        )
        assert error.fields == ("amount",)

    def test_batch_amount_is_sum_of_items(self, engine, admin_ctx, base_snapshot):
        task = run(
            engine,
            admin_ctx,
            CreateTask(
                title="Site cleanup",
                location="Site C",
                scheduled_date=NOW,
                is_batch=True,
                amount=Decimal("999"),
                sub_tasks=(
                    SubTaskDraft("Sweep", Decimal("40")),
                    SubTaskDraft("Mop", Decimal("60.50")),
                    SubTaskDraft("Check", Decimal("0")),
                ),
            ),
            base_snapshot,
        ).task
        assert task.is_batch is True
        assert task.amount == Decimal("100.50")
        assert task.id.startswith("b-")
        assert [s.title for s in task.sub_tasks] == ["Sweep", "Mop", "Check"]
        assert all(s.id for s in task.sub_tasks)
        assert task.description == "Batch task with 3 items."

    def test_batch_needs_items(self, engine, admin_ctx, base_snapshot):
        error = fail(
            engine,
            admin_ctx,
            CreateTask(title="Batch", location="Site", scheduled_date=NOW, is_batch=True),
            base_snapshot,
        )
        assert error.fields == ("sub_tasks",)

    def test_batch_item_fields_are_validated(self, engine, admin_ctx, base_snapshot):
        error = fail(
            engine,
            admin_ctx,
            CreateTask(
                title="Batch",
                location="Site",
                scheduled_date=NOW,
                is_batch=True,
                sub_tasks=(SubTaskDraft("", Decimal("5")), SubTaskDraft("Ok", Decimal("-1"))),
            ),
            base_snapshot,
        )
        assert error.fields == ("sub_tasks[0].title", "sub_tasks[1].amount")

    def test_employee_cannot_create(self, engine, employee_ctx, base_snapshot):
        error = fail(
            engine,
            employee_ctx,
            CreateTask(title="x", location="y", scheduled_date=NOW, amount=Decimal("1")),
            base_snapshot,
        )
        assert isinstance(error, AuthorizationError)


class TestEditAndDelete:
    def test_edit_recomputes_batch_amount(self, engine, admin_ctx, base_snapshot):
        task = make_task(id="b-1").with_sub_tasks([])
        snapshot = put(base_snapshot, task)
        edited = run(
            engine,
            admin_ctx,
            EditTask(
                task_id=task.id,
                title="Batch",
                location="Site A",
                scheduled_date=NOW,
                sub_tasks=(SubTaskDraft("A", Decimal("10")), SubTaskDraft("B", Decimal("15"))),
            ),
            snapshot,
        ).task
        assert edited.amount == Decimal("25")
        assert len(edited.sub_tasks) == 2

    def test_paid_task_cannot_be_edited(self, engine, admin_ctx, base_snapshot):
        task = make_task(status=TaskStatus.PAID, assigned_to="2")
        error = fail(
            engine,
            admin_ctx,
            EditTask(task.id, "New", "Site", NOW, amount=Decimal("10")),
            put(base_snapshot, task),
        )
        assert isinstance(error, IllegalTransitionError)

    def test_edit_keeps_status_and_assignee(self, engine, admin_ctx, base_snapshot):
        task = make_task(status=TaskStatus.IN_PROGRESS, assigned_to="2")
        edited = run(
            engine,
            admin_ctx,
            EditTask(task.id, "Recount", "Site B", NOW, amount=Decimal("175")),
            put(base_snapshot, task),
        ).task
        assert (edited.title, edited.location, edited.amount) == ("Recount", "Site B", Decimal("175"))
        assert edited.status == TaskStatus.IN_PROGRESS
        assert edited.assigned_to == "2"

    @pytest.mark.parametrize("status", list(TaskStatus))
    def test_creator_can_delete_in_any_state(self, engine, admin_ctx, base_snapshot, status):
        task = make_task(status=status)
        outcome = run(engine, admin_ctx, DeleteTask(task.id), put(base_snapshot, task))
        assert outcome.deleted is True

    def test_other_admin_cannot_delete(self, engine, base_snapshot):
        other_admin = ActorContext(user_id="admin-2", role=UserRole.ADMIN, now=NOW)
        error = fail(engine, other_admin, DeleteTask("t1"), base_snapshot)
        assert isinstance(error, AuthorizationError)

    def test_unknown_task(self, engine, admin_ctx, base_snapshot):
        error = fail(engine, admin_ctx, DeleteTask("missing"), base_snapshot)
        assert isinstance(error, NotFoundError)


class TestClaimAndSubmit:
    def test_claim_requires_open_task(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.IN_PROGRESS, assigned_to="someone")
        error = fail(engine, employee_ctx, ClaimTask(task.id), put(base_snapshot, task))
        assert isinstance(error, IllegalTransitionError)

    def test_done_task_cannot_be_claimed(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.DONE, assigned_to="someone")
        error = fail(engine, employee_ctx, ClaimTask(task.id), put(base_snapshot, task))
        assert isinstance(error, IllegalTransitionError)

    def test_admin_cannot_claim(self, engine, admin_ctx, base_snapshot):
        error = fail(engine, admin_ctx, ClaimTask("t1"), base_snapshot)
        assert isinstance(error, AuthorizationError)

    def test_pending_employee_cannot_claim(self, engine, pending_employee, base_snapshot):
        ctx = ActorContext.for_user(pending_employee, now=NOW)
        error = fail(engine, ctx, ClaimTask("t1"), base_snapshot)
        assert isinstance(error, AuthorizationError)

    def test_only_assignee_submits(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.IN_PROGRESS, assigned_to="someone-else")
        error = fail(
            engine, employee_ctx, SubmitProof(task.id, "p.jpg", True), put(base_snapshot, task)
        )
        assert isinstance(error, AuthorizationError)

    def test_submit_requires_photo_and_location(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.IN_PROGRESS, assigned_to=employee_ctx.user_id)
        error = fail(
            engine, employee_ctx, SubmitProof(task.id, None, False), put(base_snapshot, task)
        )
        assert isinstance(error, ValidationError)
        assert error.fields == ("photo", "location_verified")

    def test_submit_on_open_task_is_illegal(self, engine, employee_ctx, base_snapshot):
        error = fail(engine, employee_ctx, SubmitProof("t1", "p.jpg", True), base_snapshot)
        assert isinstance(error, IllegalTransitionError)

    def test_raw_photo_bytes_are_inlined(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.IN_PROGRESS, assigned_to=employee_ctx.user_id)
        done = run(
            engine, employee_ctx, SubmitProof(task.id, b"\xff\xd8jpeg", True), put(base_snapshot, task)
        ).task
        assert done.completion_photo.startswith("data:image/jpeg;base64,")


class TestConfirm:
    @pytest.mark.parametrize("status", [TaskStatus.OPEN, TaskStatus.IN_PROGRESS, TaskStatus.PAID])
    def test_confirm_requires_done(self, engine, admin_ctx, base_snapshot, status):
        task = make_task(status=status, assigned_to=None if status == TaskStatus.OPEN else "2")
        snapshot = put(base_snapshot, task)
        result = engine.handle(admin_ctx, ConfirmTask(task.id), snapshot)
        assert not result.ok
        assert isinstance(result.error, IllegalTransitionError)

    def test_confirm_twice_is_impossible(self, engine, admin_ctx, base_snapshot):
        task = make_task(status=TaskStatus.DONE, assigned_to="2")
        first = run(engine, admin_ctx, ConfirmTask(task.id), put(base_snapshot, task))
        error = fail(engine, admin_ctx, ConfirmTask(task.id), put(base_snapshot, first.task))
        assert isinstance(error, IllegalTransitionError)

    def test_ewallet_snapshot_uses_assignee_wallet(self, engine, admin_ctx, base_snapshot):
        task = make_task(
            status=TaskStatus.DONE, assigned_to="2", payment_method=PaymentMethod.EWALLET
        )
        payment = run(engine, admin_ctx, ConfirmTask(task.id), put(base_snapshot, task)).payment_request
        assert payment.method == PaymentMethod.EWALLET
        assert payment.payment_details_snapshot == "GCash: 09171234567"

    def test_ewallet_without_profile(self, engine, admin_ctx, base_snapshot):
        task = make_task(
            status=TaskStatus.DONE, assigned_to="nobody", payment_method=PaymentMethod.EWALLET
        )
        payment = run(engine, admin_ctx, ConfirmTask(task.id), put(base_snapshot, task)).payment_request
        assert payment.payment_details_snapshot == "E-Wallet"

    def test_employee_cannot_confirm(self, engine, employee_ctx, base_snapshot):
        task = make_task(status=TaskStatus.DONE, assigned_to="2")
        error = fail(engine, employee_ctx, ConfirmTask(task.id), put(base_snapshot, task))
        assert isinstance(error, AuthorizationError)


class TestQueries:
    def test_views(self):
        tasks = [
            make_task(id="a"),
            make_task(id="b", status=TaskStatus.IN_PROGRESS, assigned_to="2"),
            make_task(id="c", status=TaskStatus.DONE, assigned_to="2"),
            make_task(id="d", status=TaskStatus.PAID, assigned_to="2"),
            make_task(id="e", status=TaskStatus.IN_PROGRESS, assigned_to="3"),
        ]
        assert [t.id for t in available_tasks(tasks)] == ["a"]
        assert [t.id for t in assigned_tasks(tasks, "2")] == ["b", "c"]
        assert [t.id for t in tasks_awaiting_confirmation(tasks)] == ["c"]
        assert [t.id for t in paid_tasks(tasks)] == ["d"]


def test_to_money():
    assert to_money("12.50") == Decimal("12.50")
    assert to_money(3) == Decimal("3")
    assert to_money(None) is None
    assert to_money(True) is None
    assert to_money("Infinity") is None
    assert to_money("") is None


@pytest.mark.parametrize(
    "raw, expected",
    [("0.004", "0.00"), ("0.005", "0.01"), ("19.995", "20.00"), ("-1.005", "-1.01"), ("7", "7.00")],
)
def test_to_money_rounds_to_cents(raw, expected):
    assert str(to_money(raw)) == expected


# =============================================================================
# Properties
# =============================================================================

item_amounts = st.lists(
    st.decimals(min_value=Decimal("0"), max_value=Decimal("5000"), places=2),
    min_size=1,
    max_size=8,
)


@settings(max_examples=100)
@given(create_amounts=item_amounts, edit_amounts=item_amounts)
def test_batch_amount_tracks_items_through_create_and_edit(create_amounts, edit_amounts):
    base_snapshot = demo_snapshot(NOW)
    admin_ctx = ActorContext.for_user(base_snapshot.find_user(ADMIN_ID), now=NOW)
    engine = TaskEngine()
    drafts = tuple(SubTaskDraft(f"item {i}", a) for i, a in enumerate(create_amounts))
    created = run(
        engine,
        admin_ctx,
        CreateTask(title="Batch", location="Site", scheduled_date=NOW, is_batch=True, sub_tasks=drafts),
        base_snapshot,
    ).task
    assert created.amount == sum(s.amount for s in created.sub_tasks)

    drafts = tuple(SubTaskDraft(f"item {i}", a) for i, a in enumerate(edit_amounts))
    edited = run(
        engine,
        admin_ctx,
        EditTask(created.id, "Batch", "Site", NOW, sub_tasks=drafts),
        put(base_snapshot, created),
    ).task
    assert edited.amount == sum(s.amount for s in edited.sub_tasks)
    assert edited.amount == sum(edit_amounts)


@settings(max_examples=50)
@given(status=st.sampled_from([TaskStatus.OPEN, TaskStatus.IN_PROGRESS, TaskStatus.PAID]))
def test_confirm_outside_done_leaves_no_payment(status):
    base_snapshot = demo_snapshot(NOW)
    admin_ctx = ActorContext.for_user(base_snapshot.find_user(ADMIN_ID), now=NOW)
    task = make_task(status=status, assigned_to="2")
    snapshot = put(base_snapshot, task)
    result = TaskEngine().handle(admin_ctx, ConfirmTask(task.id), snapshot)
    assert isinstance(result.error, IllegalTransitionError)
    # the snapshot itself is immutable; nothing to persist
    assert snapshot.find_task(task.id) == task
    assert snapshot.payment_requests == ()


def test_confirm_once_creates_exactly_one_payment(base_snapshot, admin_ctx):
    task = make_task(status=TaskStatus.DONE, assigned_to="2", amount=Decimal("87.25"))
    outcome = run(TaskEngine(), admin_ctx, ConfirmTask(task.id), put(base_snapshot, task))
    assert outcome.payment_request.amount == task.amount
    assert outcome.payment_request.task_id == task.id
    assert outcome.payment_request.status == PaymentStatus.PAID
    assert replace(outcome.task, status=TaskStatus.DONE) == task
