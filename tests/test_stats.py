from datetime import date, datetime, time, timedelta, timezone

from sqlmodel import Session

from codepractice import stats
from codepractice.models import Submission, SubmissionStatus


def _utc(day: date, hour: int = 12) -> datetime:
    """UTC timestamp for a given server-local day and hour."""
    return datetime.combine(day, time(hour)).astimezone(timezone.utc)


def _add(engine, user_id, question_id, status, submitted_at=None, runtime=None):
    with Session(engine) as s:
        sub = Submission(user_id=user_id, question_id=question_id, status=status, runtime=runtime)
        if submitted_at is not None:
            sub.submitted_at = submitted_at
        s.add(sub)
        s.commit()


def test_streak_counts_back_from_today():
    today = date(2024, 5, 10)
    days = [date(2024, 5, 10), date(2024, 5, 9), date(2024, 5, 8), date(2024, 5, 6)]
    assert stats.current_streak(days, today) == 3


def test_streak_may_end_yesterday():
    today = date(2024, 5, 10)
    assert stats.current_streak([date(2024, 5, 9), date(2024, 5, 8)], today) == 2


def test_streak_broken_before_yesterday():
    today = date(2024, 5, 10)
    assert stats.current_streak([date(2024, 5, 8), date(2024, 5, 7)], today) == 0
    assert stats.current_streak([], today) == 0


def test_local_day_reads_aware_and_stored_stamps():
    stamp = _utc(date(2024, 5, 10), 23)
    assert stats.local_day(stamp) == date(2024, 5, 10)
    assert stats.local_day(stamp.replace(tzinfo=None)) == date(2024, 5, 10)


def test_day_bounds_are_utc():
    start, end = stats.local_day_bounds(date(2024, 5, 10))
    assert start.tzinfo == timezone.utc
    assert end - start == timedelta(days=1)


def test_user_stats_with_no_submissions(client, student_headers):
    resp = client.get("/stats/user", headers=student_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "totalSubmissions": 0,
        "acceptedSubmissions": 0,
        "successRate": 0,
        "averageRuntime": 0,
        "currentStreak": 0,
    }


def test_user_stats_aggregates(session, engine, student_user, other_student, mcq_question):
    today = date(2024, 5, 10)
    accepted, wrong = SubmissionStatus.accepted, SubmissionStatus.wrong_answer
    _add(engine, student_user.id, mcq_question.id, accepted, _utc(today), runtime=100)
    _add(engine, student_user.id, mcq_question.id, wrong, _utc(today), runtime=200)
    _add(engine, student_user.id, mcq_question.id, accepted, _utc(today - timedelta(days=1)))
    _add(engine, student_user.id, mcq_question.id, wrong, _utc(today - timedelta(days=2)))
    _add(engine, other_student.id, mcq_question.id, accepted, _utc(today), runtime=900)

    result = stats.get_user_stats(session, student_user.id, today=today)
    assert result.total_submissions == 4
    assert result.accepted_submissions == 2
    assert result.success_rate == 50.0
    assert result.average_runtime == 150.0
    assert result.current_streak == 2


def test_streak_uses_local_calendar_days(session, engine, student_user, mcq_question):
    today = date(2024, 5, 10)
    # both ends of the same local day count once
    _add(engine, student_user.id, mcq_question.id, SubmissionStatus.accepted, _utc(today, 0))
    _add(engine, student_user.id, mcq_question.id, SubmissionStatus.accepted, _utc(today, 23))
    assert stats.get_user_stats(session, student_user.id, today=today).current_streak == 1


def test_admin_stats(session, engine, admin_user, student_user, other_student, mcq_question, coding_question):
    today = date(2024, 5, 10)
    _add(engine, student_user.id, mcq_question.id, SubmissionStatus.accepted, _utc(today, 9))
    _add(engine, other_student.id, coding_question.id, SubmissionStatus.runtime_error, _utc(today, 18))
    _add(engine, other_student.id, coding_question.id, SubmissionStatus.accepted, _utc(today - timedelta(days=1)))
    _add(engine, student_user.id, coding_question.id, SubmissionStatus.wrong_answer, _utc(today + timedelta(days=1)))

    result = stats.get_admin_stats(session, today=today)
    assert result.active_students == 2
    assert result.total_questions == 2
    assert result.daily_submissions == 2
    assert result.success_rate == 50.0


def test_admin_stats_skip_deleted_questions(client, admin_headers, mcq_question, coding_question):
    client.delete(f"/questions/{mcq_question.id}", headers=admin_headers)
    body = client.get("/stats/admin", headers=admin_headers).json()
    assert body["totalQuestions"] == 1
    assert body["successRate"] == 0


def test_admin_stats_endpoint_counts_todays_submissions(client, admin_headers, student_headers, mcq_question):
    client.post("/submissions", json={"questionId": mcq_question.id, "answer": "object"}, headers=student_headers)
    client.post("/submissions", json={"questionId": mcq_question.id, "answer": "null"}, headers=student_headers)
    body = client.get("/stats/admin", headers=admin_headers).json()
    assert body == {"activeStudents": 1, "totalQuestions": 1, "dailySubmissions": 2, "successRate": 50.0}


def test_admin_stats_forbidden_for_students(client, student_headers):
    assert client.get("/stats/admin", headers=student_headers).status_code == 403


def test_user_stats_after_submitting(client, student_headers, mcq_question):
    client.post("/submissions", json={"questionId": mcq_question.id, "answer": "object"}, headers=student_headers)
    body = client.get("/stats/user", headers=student_headers).json()
    assert body["totalSubmissions"] == 1
    assert body["successRate"] == 100
    assert body["currentStreak"] == 1


def test_new_rows_get_utc_timestamps(client, student_headers, student_user, mcq_question):
    fresh = Submission(user_id=student_user.id, question_id=mcq_question.id)
    assert fresh.submitted_at.tzinfo == timezone.utc

    resp = client.post("/submissions", json={"questionId": mcq_question.id, "answer": "object"}, headers=student_headers)
    assert resp.status_code == 201
    assert stats.local_day(datetime.fromisoformat(resp.json()["submittedAt"].replace("Z", "+00:00"))) == datetime.now().date()
