import time

import pytest

from mockinterview.config import STOP_GRACE_TICKS
from mockinterview.interview.capture import STATUS_FINISHING
from mockinterview.interview.errors import (
    ActionNotAllowed, EmptyAnswer, IncompleteAnswers, PersistenceFailure,
)
from mockinterview.interview.events import EventType
from mockinterview.interview.models import CapturePhase, InterviewStatus
from mockinterview.interview.orchestrator import InterviewSession
from mockinterview.interview.testing import (
    InMemoryDirectoryService, RecordingResponseService, ScriptedTranscriber,
    build_test_interview, create_mock_session,
)


def test_dictate_confirm_and_save_one_answer() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber

    assert session.start_capture() is True
    session.tick(3)
    mic.say("hello")
    mic.say(" world")
    mic.end()

    view = session.view()
    assert view.phase == CapturePhase.CONFIRMING
    assert view.draft_text == "hello world"
    assert view.answer_elapsed == 3

    assert session.confirm() == "hello world"
    assert session.view().local_answer == "hello world"

    session.save()
    assert setup.responses.submissions == [("q1", "int-1", "hello world")]
    view = session.view()
    assert view.saved_answer == "hello world"
    assert view.unsaved == []


def test_two_question_interview_from_dictation_to_completion() -> None:
    interview = build_test_interview(question_texts=["Introduce yourself.", "Any questions for us?"])
    setup = create_mock_session(interview)
    session, mic = setup.session, setup.transcriber

    session.start_capture()
    mic.say("hello world")
    mic.end()
    session.confirm()
    assert session.tracker.local_answers == {0: "hello world"}
    assert session.tracker.is_all_answered() is False

    session.next_question()
    session.edit_answer("done")
    session.save()
    assert setup.directory.interviews["int-1"].questions[1].saved_text == "done"
    assert session.tracker.is_all_answered() is True

    session.complete()
    assert session.tracker.interview.status == InterviewStatus.COMPLETED


def test_transcript_events_wait_for_the_control_thread() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    session.start_capture()
    mic.say("queued")
    assert session.capture.draft_text == ""
    assert session.pump() == 1
    assert session.capture.draft_text == "queued"


def test_stream_error_before_final_changes_nothing() -> None:
    setup = create_mock_session(build_test_interview(answers={0: "kept"}))
    session, mic = setup.session, setup.transcriber
    failures = []
    session.event_bus.subscribe(EventType.STREAM_FAILED, failures.append)

    session.start_capture()
    mic.partial("I think")
    mic.fail("network")

    view = session.view()
    assert view.phase == CapturePhase.IDLE
    assert view.local_answer == "kept"
    assert failures[0].data["reason"] == "network"
    assert setup.responses.submissions == []


def test_moving_to_another_question_abandons_capture() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    changes = []
    session.event_bus.subscribe(EventType.QUESTION_CHANGED, changes.append)

    session.start_capture()
    mic.say("half an answer")
    assert session.next_question() is True

    view = session.view()
    assert view.index == 1
    assert view.phase == CapturePhase.IDLE
    assert session.tracker.local_answer(0) == ""
    assert mic.stop_count >= 1
    assert changes[0].data == {"from": 0}

    mic.end()
    assert session.view().phase == CapturePhase.IDLE


def test_confirmed_answer_lands_on_the_question_it_was_captured_for() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    session.go_to(2)
    session.start_capture()
    mic.say("third answer")
    mic.end()
    session.confirm()
    assert session.tracker.local_answers == {2: "third answer"}


def test_save_empty_answer_makes_no_call() -> None:
    setup = create_mock_session()
    with pytest.raises(EmptyAnswer):
        setup.session.save()
    assert setup.responses.submissions == []


def test_failed_save_keeps_local_answer() -> None:
    setup = create_mock_session()
    session = setup.session
    session.edit_answer("typed answer")
    setup.responses.fail_with("server down")

    with pytest.raises(PersistenceFailure):
        session.save()

    view = session.view()
    assert view.local_answer == "typed answer"
    assert view.saved_answer == ""
    assert view.unsaved == [0]
    assert view.submitting is False
    assert session.metrics.get_metrics()["errors_occurred"] == 1

    setup.responses.recover()
    session.save()
    assert session.view().saved_answer == "typed answer"


def test_typing_is_the_fallback_when_speech_is_unavailable() -> None:
    setup = create_mock_session(transcriber=ScriptedTranscriber(available=False))
    session = setup.session

    assert session.start_capture() is False
    view = session.view()
    assert view.capture_available is False
    assert view.editing_enabled is True

    session.edit_answer("typed instead")
    session.save()
    assert setup.responses.submissions == [("q1", "int-1", "typed instead")]


def test_toggle_starts_then_stops() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    assert session.toggle_capture() is True
    mic.say("toggled")
    assert session.toggle_capture() is False
    assert session.view().phase == CapturePhase.CONFIRMING


def test_stop_keeps_the_final_fragment_sent_while_closing() -> None:
    setup = create_mock_session(transcriber=ScriptedTranscriber(final_on_stop="hello world"))
    session, mic = setup.session, setup.transcriber

    session.start_capture()
    mic.partial("hello world")
    session.stop_capture()

    view = session.view()
    assert view.phase == CapturePhase.CONFIRMING
    assert view.draft_text == "hello world"
    assert session.confirm() == "hello world"


def test_stop_waits_for_a_recognizer_that_is_still_flushing() -> None:
    setup = create_mock_session(transcriber=ScriptedTranscriber(lingers=True))
    session, mic = setup.session, setup.transcriber

    session.start_capture()
    mic.partial("almost")
    session.stop_capture()
    assert session.view().phase == CapturePhase.LISTENING
    assert session.capture.stopping is True
    assert session.view().voice_status == STATUS_FINISHING

    mic.say("almost there")
    mic.end()
    view = session.view()
    assert view.phase == CapturePhase.CONFIRMING
    assert view.draft_text == "almost there"


def test_stop_gives_up_waiting_after_grace_ticks() -> None:
    setup = create_mock_session(transcriber=ScriptedTranscriber(lingers=True))
    session, mic = setup.session, setup.transcriber

    session.start_capture()
    mic.say("heard")
    session.stop_capture()
    session.tick(STOP_GRACE_TICKS - 1)
    assert session.view().phase == CapturePhase.LISTENING

    session.tick()
    assert session.view().phase == CapturePhase.CONFIRMING
    mic.say(" too late")
    assert session.view().draft_text == "heard"


def test_complete_only_from_last_question_with_everything_answered() -> None:
    setup = create_mock_session(build_test_interview(answers={0: "a", 1: "b"}))
    session = setup.session

    assert session.view().can_complete is False
    with pytest.raises(IncompleteAnswers):
        session.complete()

    session.go_to(2)
    session.edit_answer("c")
    view = session.view()
    assert view.all_answered is True
    assert view.can_complete is True

    session.complete()
    assert session.view().status == "completed"
    assert setup.directory.interviews["int-1"].status == InterviewStatus.COMPLETED


def test_scheduled_interview_must_be_started_first() -> None:
    setup = create_mock_session(build_test_interview(status=InterviewStatus.SCHEDULED))
    session = setup.session
    assert session.view().editing_enabled is False
    with pytest.raises(ActionNotAllowed):
        session.edit_answer("too early")

    session.begin()
    assert session.view().status == "in_progress"
    session.edit_answer("now it works")
    assert session.view().local_answer == "now it works"


def test_session_clock_ticks_while_open() -> None:
    setup = create_mock_session()
    session = setup.session
    session.tick(2)
    assert session.view().session_elapsed == 2
    assert session.view().answer_elapsed == 0


def test_close_releases_stream_and_blocks_intents() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    closed = []
    session.event_bus.subscribe(EventType.SESSION_CLOSED, closed.append)
    session.start_capture()

    session.close()
    session.close()

    assert session.capture.phase == CapturePhase.IDLE
    assert mic.stop_count >= 1
    assert len(closed) == 1
    with pytest.raises(ActionNotAllowed):
        session.start_capture()


def test_context_manager_closes_on_error() -> None:
    interview = build_test_interview()
    directory = InMemoryDirectoryService([interview])
    mic = ScriptedTranscriber()
    with pytest.raises(RuntimeError):
        with InterviewSession(directory, RecordingResponseService(directory), mic, auto_tick=False) as session:
            session.open("int-1")
            session.start_capture()
            raise RuntimeError("front-end crashed")
    assert session.capture.phase == CapturePhase.IDLE
    assert mic.stop_count >= 1


def test_open_unknown_interview_fails() -> None:
    setup = create_mock_session(open_session=False)
    with pytest.raises(PersistenceFailure) as excinfo:
        setup.session.open("missing")
    assert excinfo.value.status_code == 404


def test_metrics_follow_capture_events() -> None:
    setup = create_mock_session()
    session, mic = setup.session, setup.transcriber
    session.start_capture()
    mic.say("one")
    mic.end()
    session.retry()
    session.start_capture()
    mic.say("two")
    mic.end()
    session.confirm()
    session.save()

    metrics = session.metrics.get_metrics()
    assert metrics["captures_started"] == 2
    assert metrics["captures_retried"] == 1
    assert metrics["answers_confirmed"] == 1
    assert metrics["answers_saved"] == 1


def test_tick_driver_feeds_the_session_clock() -> None:
    interview = build_test_interview()
    directory = InMemoryDirectoryService([interview])
    session = InterviewSession(directory, RecordingResponseService(directory), ScriptedTranscriber(),
                               tick_interval=0.01)
    with session:
        session.open("int-1")
        deadline = time.time() + 2.0
        while session.view().session_elapsed == 0 and time.time() < deadline:
            time.sleep(0.01)
        assert session.view().session_elapsed > 0
    assert not session.tick_driver.running
