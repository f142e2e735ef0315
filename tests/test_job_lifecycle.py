import uuid
from datetime import date

import pytest
from fastapi import HTTPException
from sqlmodel import select

from covershift.models.availability import AvailabilityOverride
from covershift.models.job import Job
from covershift.models.notification import Notification
from covershift.repositories.availability_repo import AvailabilityRepository
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.notification_repo import NotificationRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.job import JobCreate, JobUpdate
from covershift.services.job_lifecycle import JobLifecycle, each_date


def _lifecycle(decline_reopens=False):
    return JobLifecycle(
        JobRepository(),
        ProfileRepository(),
        AvailabilityRepository(),
        NotificationRepository(),
        decline_reopens=decline_reopens,
    )


def _create(session, principal, start="2025-11-03", end=None, requested=None, title="Cover class"):
    payload = JobCreate(
        title=title,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end) if end else None,
        requested_teacher=requested,
    )
    return _lifecycle().create_job(session, principal, payload)


def _override_dates(session, teacher_id):
    rows = session.exec(
        select(AvailabilityOverride).where(AvailabilityOverride.teacher_id == teacher_id)
    ).all()
    return sorted(r.date for r in rows if r.available is False)


def test_each_date_spans_inclusive_range():
    assert each_date(date(2025, 11, 3), date(2025, 11, 5)) == [
        date(2025, 11, 3),
        date(2025, 11, 4),
        date(2025, 11, 5),
    ]
    assert each_date(date(2025, 11, 3), None) == [date(2025, 11, 3)]
    assert each_date(date(2025, 11, 5), date(2025, 11, 4)) == [
        date(2025, 11, 4),
        date(2025, 11, 5),
    ]


def test_create_without_teacher_is_open(session, principal):
    job = _create(session, principal)
    assert job.status == "open"
    assert job.created_by == principal.id
    assert job.accepted_by is None


def test_create_with_teacher_is_requested(session, principal, teacher):
    job = _create(session, principal, requested=teacher.id)
    assert job.status == "requested"
    assert job.requested_teacher == teacher.id


def test_create_rejects_non_teacher_request(session, principal, make_profile):
    other_principal = make_profile("principal")
    with pytest.raises(HTTPException) as exc:
        _create(session, principal, requested=other_principal.id)
    assert exc.value.status_code == 400


def test_create_rejects_reversed_dates():
    with pytest.raises(ValueError):
        JobCreate(title="x", start_date=date(2025, 11, 5), end_date=date(2025, 11, 3))


def test_accept_open_job(session, principal, teacher):
    job = _create(session, principal, end="2025-11-04")
    accepted = _lifecycle().accept(session, teacher, job.id)

    assert accepted.status == "accepted"
    assert accepted.accepted_by == teacher.id
    assert _override_dates(session, teacher.id) == [date(2025, 11, 3), date(2025, 11, 4)]


def test_second_accept_of_open_job_conflicts(session, principal, teacher, other_teacher):
    job = _create(session, principal)
    lifecycle = _lifecycle()
    lifecycle.accept(session, teacher, job.id)

    with pytest.raises(HTTPException) as exc:
        lifecycle.accept(session, other_teacher, job.id)
    assert exc.value.status_code == 409

    current = session.get(Job, job.id, populate_existing=True)
    assert current.accepted_by == teacher.id
    assert _override_dates(session, other_teacher.id) == []


def test_stale_open_accept_touches_no_rows(session, principal, teacher, other_teacher):
    """The guard, not the pre-read, decides who wins."""
    job = _create(session, principal)
    repo = JobRepository()
    first = repo.conditional_update(
        session,
        job.id,
        [Job.status == "open", Job.accepted_by.is_(None)],
        {"status": "accepted", "accepted_by": teacher.id},
    )
    second = repo.conditional_update(
        session,
        job.id,
        [Job.status == "open", Job.accepted_by.is_(None)],
        {"status": "accepted", "accepted_by": other_teacher.id},
    )
    session.commit()
    assert (first, second) == (1, 0)


def test_requested_job_only_accepted_by_requested_teacher(session, principal, teacher, other_teacher):
    job = _create(session, principal, requested=teacher.id)

    with pytest.raises(HTTPException) as exc:
        _lifecycle().accept(session, other_teacher, job.id)
    assert exc.value.status_code == 403
    assert session.get(Job, job.id, populate_existing=True).status == "requested"

    accepted = _lifecycle().accept(session, teacher, job.id)
    assert accepted.status == "accepted"
    assert accepted.accepted_by == teacher.id


def test_accept_notifies_creator(session, principal, teacher):
    job = _create(session, principal)
    _lifecycle().accept(session, teacher, job.id)

    notes = session.exec(select(Notification).where(Notification.user_id == principal.id)).all()
    assert [n.kind for n in notes] == ["job_accepted"]
    assert "Tess Teacher" in notes[0].message


def test_decline_marks_declined(session, principal, teacher):
    job = _create(session, principal, requested=teacher.id)
    declined = _lifecycle().decline(session, teacher, job.id)
    assert declined.status == "declined"
    assert declined.requested_teacher == teacher.id


def test_decline_can_reopen(session, principal, teacher):
    job = _create(session, principal, requested=teacher.id)
    reopened = _lifecycle(decline_reopens=True).decline(session, teacher, job.id)
    assert reopened.status == "open"
    assert reopened.requested_teacher is None


def test_decline_by_other_teacher_forbidden(session, principal, teacher, other_teacher):
    job = _create(session, principal, requested=teacher.id)
    with pytest.raises(HTTPException) as exc:
        _lifecycle().decline(session, other_teacher, job.id)
    assert exc.value.status_code == 403


def test_decline_open_job_conflicts(session, principal, teacher):
    job = _create(session, principal)
    with pytest.raises(HTTPException) as exc:
        _lifecycle().decline(session, teacher, job.id)
    assert exc.value.status_code == 409


def test_release_by_holder_reopens(session, principal, teacher):
    job = _create(session, principal, requested=teacher.id)
    lifecycle = _lifecycle()
    lifecycle.accept(session, teacher, job.id)

    released = lifecycle.release(session, teacher, job.id)
    assert released.status == "open"
    assert released.accepted_by is None
    assert released.requested_teacher is None
    assert _override_dates(session, teacher.id) == []


def test_release_by_non_holder_forbidden(session, principal, teacher, other_teacher):
    job = _create(session, principal)
    lifecycle = _lifecycle()
    lifecycle.accept(session, teacher, job.id)

    for actor in (other_teacher, principal):
        with pytest.raises(HTTPException) as exc:
            lifecycle.release(session, actor, job.id)
        assert exc.value.status_code == 403
    assert session.get(Job, job.id, populate_existing=True).status == "accepted"


def test_release_keeps_days_of_other_accepted_jobs(session, principal, teacher):
    lifecycle = _lifecycle()
    week = _create(session, principal, start="2025-11-03", end="2025-11-05")
    tuesday = _create(session, principal, start="2025-11-04")
    lifecycle.accept(session, teacher, week.id)
    lifecycle.accept(session, teacher, tuesday.id)

    lifecycle.release(session, teacher, week.id)
    assert _override_dates(session, teacher.id) == [date(2025, 11, 4)]


def test_release_open_job_conflicts(session, principal, teacher):
    job = _create(session, principal)
    with pytest.raises(HTTPException) as exc:
        _lifecycle().release(session, teacher, job.id)
    assert exc.value.status_code == 409


def test_edit_by_creator(session, principal):
    job = _create(session, principal)
    edited = _lifecycle().edit(
        session, principal, job.id, JobUpdate(title="Cover 3rd class", notes="Room 4")
    )
    assert edited.title == "Cover 3rd class"
    assert edited.notes == "Room 4"
    assert edited.status == "open"


def test_edit_by_other_principal_forbidden(session, principal, make_profile):
    job = _create(session, principal)
    intruder = make_profile("principal")
    with pytest.raises(HTTPException) as exc:
        _lifecycle().edit(session, intruder, job.id, JobUpdate(title="Mine now"))
    assert exc.value.status_code == 403


def test_edit_rejects_reversed_range(session, principal):
    job = _create(session, principal, start="2025-11-03", end="2025-11-05")
    with pytest.raises(HTTPException) as exc:
        _lifecycle().edit(session, principal, job.id, JobUpdate(end_date=date(2025, 11, 1)))
    assert exc.value.status_code == 400


def test_edit_dates_of_accepted_job_conflicts(session, principal, teacher):
    job = _create(session, principal)
    lifecycle = _lifecycle()
    lifecycle.accept(session, teacher, job.id)
    with pytest.raises(HTTPException) as exc:
        lifecycle.edit(session, principal, job.id, JobUpdate(start_date=date(2025, 11, 10)))
    assert exc.value.status_code == 409


def test_delete_by_creator_frees_teacher(session, principal, teacher):
    job = _create(session, principal)
    lifecycle = _lifecycle()
    lifecycle.accept(session, teacher, job.id)

    lifecycle.delete(session, principal, job.id)
    assert session.exec(select(Job).where(Job.id == job.id)).first() is None
    assert _override_dates(session, teacher.id) == []


def test_delete_by_other_forbidden(session, principal, teacher):
    job = _create(session, principal)
    with pytest.raises(HTTPException) as exc:
        _lifecycle().delete(session, teacher, job.id)
    assert exc.value.status_code == 403
    assert session.get(Job, job.id) is not None


def test_missing_job_is_404(session, teacher):
    with pytest.raises(HTTPException) as exc:
        _lifecycle().accept(session, teacher, uuid.uuid4())
    assert exc.value.status_code == 404
