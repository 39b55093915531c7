#!/usr/bin/env python3
"""
Main entry point for the mock interview session client.
Allows running the package with: python -m mockinterview
"""
import sys
import time

from .config import get_config, STOP_GRACE_TICKS, TICK_SECONDS
from .utils import setup_logging
from .infrastructure.api import DirectoryRestClient
from .interview import (
    InterviewSession, InterviewDirectoryService, ResponsePersistenceService,
    InterviewSessionError, PersistenceFailure, UnavailableTranscriber,
    EventType, SessionEvent, render_view, format_time
)

USAGE = """Usage:
  python -m mockinterview list
  python -m mockinterview <interview_id> [--text] [--language=es-ES]

Session commands:
  rec / stop        start or stop dictating the current answer
  confirm / retry   keep or discard the dictated draft
  type <text>       type the answer instead
  save              save the current answer
  next / prev       move between questions
  go <n>            jump to question n
  begin             start a scheduled interview
  complete          finish the interview (last question only)
  exit              leave the session
  (empty line)      refresh the screen
"""


def _list_interviews(directory: InterviewDirectoryService) -> None:
    interviews = directory.list_interviews()
    if not interviews:
        print("📭 No interviews found.")
        return
    for item in interviews:
        interview_id = item.get("_id") or item.get("id", "?")
        questions = item.get("questions", [])
        count = questions if isinstance(questions, int) else len(questions)
        print(f"• {interview_id}  {item.get('title', '(untitled)')}  [{item.get('status', '?')}]  {count} questions")


def _build_transcriber(config, text_mode: bool, language_code: str):
    if text_mode or not config.enable_speech:
        return UnavailableTranscriber("speech disabled; type your answers")
    from .infrastructure.audio import GoogleStreamingTranscriber
    return GoogleStreamingTranscriber(language_code=language_code)


def _print_toast(event: SessionEvent) -> None:
    if event.event_type == EventType.STREAM_FAILED:
        print(f"⚠️  Speech recognition error: {event.data.get('reason')}")
    elif event.event_type == EventType.CAPABILITY_UNAVAILABLE:
        print("🚫 Speech recognition is not available here. Use 'type <text>'.")
    elif event.event_type == EventType.ANSWER_SAVED:
        print(f"✅ Answer {event.question_index + 1} saved")
    elif event.event_type == EventType.INTERVIEW_STARTED:
        print("▶️  Interview started")
    elif event.event_type == EventType.INTERVIEW_COMPLETED:
        print("🎉 Interview completed. Well done!")


def _await_stop(session: InterviewSession) -> None:
    """Give the recognizer time to flush its last words after a stop."""
    deadline = time.monotonic() + (STOP_GRACE_TICKS + 1) * TICK_SECONDS
    while session.capture.stopping and time.monotonic() < deadline:
        time.sleep(0.1)
        session.pump()


def _run_command(session: InterviewSession, line: str) -> bool:
    """Apply one REPL command. Returns False when the session should end."""
    command, _, rest = line.partition(" ")
    command = command.lower()

    if command in ("exit", "quit", "q"):
        return False
    if command in ("rec", "record"):
        session.start_capture()
    elif command == "stop":
        session.stop_capture()
        _await_stop(session)
    elif command in ("mic", "toggle"):
        session.toggle_capture()
        _await_stop(session)
    elif command == "confirm":
        session.confirm()
    elif command == "retry":
        session.retry()
    elif command == "type":
        session.edit_answer(rest)
    elif command == "clear":
        session.edit_answer("")
    elif command == "save":
        session.save()
    elif command == "next":
        if not session.next_question():
            print("ℹ️  Already at the last question")
    elif command in ("prev", "previous"):
        if not session.previous_question():
            print("ℹ️  Already at the first question")
    elif command == "go":
        try:
            session.go_to(int(rest) - 1)
        except ValueError:
            print("❌ Usage: go <question number>")
        except IndexError as e:
            print(f"❌ {e}")
    elif command == "begin":
        session.begin()
    elif command == "complete":
        if not session.view().can_complete:
            print("❌ Answer every question and go to the last one before completing")
            return True
        session.complete()
        return False
    elif command in ("help", "?"):
        print(USAGE)
    else:
        print(f"❌ Unknown command: {command} (type 'help')")
    return True


def _repl(session: InterviewSession) -> None:
    while True:
        print()
        for line in render_view(session.view()):
            print(line)
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not line:
            continue
        try:
            if not _run_command(session, line):
                return
        except PersistenceFailure as e:
            print(f"❌ Could not {e.operation.replace('_', ' ')}: {e.message}")
        except InterviewSessionError as e:
            print(f"❌ {e.message}")


def main():
    """Command-line interface for the session client."""

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    text_mode = "--text" in sys.argv or "--no-speech" in sys.argv
    language_code = config.language_code
    for arg in sys.argv[1:]:
        if arg.startswith("--language="):
            language_code = arg.split("=", 1)[1] or language_code
        elif arg in ("-h", "--help"):
            print(USAGE)
            return

    if not args:
        print(USAGE)
        sys.exit(2)

    log_path = setup_logging(config.log_file, config.log_level)

    client = DirectoryRestClient(config.api_base_url, token=config.api_token, timeout=config.request_timeout)
    directory = InterviewDirectoryService(client)
    responses = ResponsePersistenceService(client)

    if args[0] == "list":
        try:
            _list_interviews(directory)
        except PersistenceFailure as e:
            print(f"❌ Could not list interviews: {e.message}")
            sys.exit(1)
        return

    transcriber = _build_transcriber(config, text_mode, language_code)
    if text_mode or not config.enable_speech:
        print("📝 Text Mode: type your answers with 'type <text>'")
    else:
        print(f"🎤 Speech Mode: dictate answers with 'rec' ({language_code})")
        print("   (Use --text to type answers instead)")

    with InterviewSession(directory, responses, transcriber, tick_interval=config.tick_seconds) as session:
        try:
            session.open(args[0])
        except PersistenceFailure as e:
            print(f"❌ Could not load interview {args[0]}: {e.message}")
            sys.exit(1)

        session.event_bus.subscribe_all(_print_toast)
        _repl(session)

        print(f"⏱️  Session time: {format_time(session.timers.session_elapsed)}")

    print(f"📄 Log: {log_path}")


if __name__ == "__main__":
    main()
