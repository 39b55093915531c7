"""
Candidate answer assembled from transcript fragments.
"""
from .transcript import Fragment


class AnswerDraftBuffer:
    """
    Final fragments are appended verbatim (no separator is inserted, the
    recognizer's own spacing is kept). The latest partial fragment is held
    for live display only and never becomes part of the draft.
    """

    def __init__(self):
        self.draft_text = ""
        self.live_partial = ""

    def append(self, fragment: Fragment) -> None:
        if fragment.is_final:
            self.draft_text += fragment.text
            self.live_partial = ""
        else:
            self.live_partial = fragment.text

    def reset(self) -> None:
        self.draft_text = ""
        self.live_partial = ""

    def snapshot(self) -> str:
        return self.draft_text.strip()

    def is_empty(self) -> bool:
        return not self.snapshot()
