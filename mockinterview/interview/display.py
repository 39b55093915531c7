"""
Plain-text rendering of a session view for the terminal front-end.
"""
from typing import List

from .models import CapturePhase
from .orchestrator import SessionView


def format_time(seconds: int) -> str:
    """Seconds as ``MM:SS``; minutes keep counting past 59."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def progress_percent(index: int, count: int) -> float:
    if count <= 0:
        return 0.0
    return (index + 1) / count * 100


def progress_bar(index: int, count: int, width: int = 30) -> str:
    filled = int(round(progress_percent(index, count) / 100 * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def render_view(view: SessionView) -> List[str]:
    """Lines describing the current question, answer, timers and actions."""
    if view.count == 0:
        return [f"📭 {view.title or 'Interview'} has no questions."]

    lines = [
        f"🎙️  {view.title}   {view.index + 1} / {view.count}   ({view.status})",
        progress_bar(view.index, view.count),
        f"Q{view.index + 1} · difficulty: {view.difficulty}",
        f"   {view.question_text}",
        "",
    ]

    if view.status == "completed":
        lines.append(f"💬 {view.saved_answer or '(no response)'}")
    elif view.status == "in_progress":
        if view.phase == CapturePhase.CONFIRMING:
            lines.append("📝 Pending confirmation:")
            lines.append(f"   {view.draft_text.strip()}")
        else:
            lines.append(f"✏️  {view.local_answer or '(unanswered)'}")
            if view.local_answer and view.local_answer.strip() != view.saved_answer.strip():
                lines.append("   (not saved yet)")

        if view.voice_status:
            lines.append(f"🔈 {view.voice_status}")

        if view.phase != CapturePhase.IDLE:
            lines.append(f"⏱️  Response: {format_time(view.answer_elapsed)}   Total: {format_time(view.session_elapsed)}")

        lines.append("")
        lines.append("Actions: " + ", ".join(_actions(view)))
    else:
        lines.append("This interview has not started yet. Type 'begin' to start it.")

    return lines


def _actions(view: SessionView) -> List[str]:
    actions = []
    if view.phase == CapturePhase.CONFIRMING:
        actions += ["retry", "confirm"]
    else:
        if view.capture_available:
            actions.append("stop" if view.phase == CapturePhase.LISTENING else "rec")
        if view.editing_enabled:
            actions.append("type <text>")
        if not view.submitting and view.local_answer.strip():
            actions.append("save")
    if view.index > 0:
        actions.append("prev")
    if not view.is_last_question:
        actions.append("next")
    actions.append("complete" if view.can_complete else "exit")
    return actions
