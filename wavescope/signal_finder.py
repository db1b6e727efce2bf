"""Signal finder: fuzzy filtering and multi-selection of signal names.

This is the state behind the signal-selection popup. Rendering it and feeding
it key presses is left to the UI; the finder only tracks the query, the
ranked matches, the cursor and the selected set.
"""

from typing import Iterable, List, Optional, Sequence, Set

from rapidfuzz import fuzz


def is_subsequence(query: str, text: str) -> bool:
    """True if all characters of query appear in text in order."""
    pos = 0
    for char in query:
        pos = text.find(char, pos)
        if pos == -1:
            return False
        pos += 1
    return True


class SignalFinder:
    """Fuzzy finder over the signal names of one loaded waveform.

    Filtering first requires the query to be a case-insensitive subsequence of
    the name, then ranks the survivors with rapidfuzz's partial_ratio.
    """

    def __init__(self, all_signals: Sequence[str], displayed_signals: Iterable[str] = (),
                 score_threshold: float = 50) -> None:
        self.all_signals: List[str] = list(all_signals)
        self.selected: Set[str] = set(displayed_signals)
        self.score_threshold = score_threshold
        self.query = ""
        self.filtered: List[str] = []
        self.cursor: Optional[int] = None
        self._update_filtered()

    # ---- Query editing ----
    def set_query(self, query: str) -> None:
        self.query = query
        self._update_filtered()

    def push_char(self, c: str) -> None:
        self.query += c
        self._update_filtered()

    def backspace(self) -> None:
        if self.query:
            self.query = self.query[:-1]
            self._update_filtered()

    # ---- Cursor ----
    def current(self) -> Optional[str]:
        if self.cursor is None:
            return None
        return self.filtered[self.cursor]

    def select_next(self) -> None:
        if not self.filtered:
            self.cursor = None
            return
        if self.cursor is None or self.cursor >= len(self.filtered) - 1:
            self.cursor = 0
        else:
            self.cursor += 1

    def select_previous(self) -> None:
        if not self.filtered:
            self.cursor = None
            return
        if self.cursor is None or self.cursor == 0:
            self.cursor = len(self.filtered) - 1
        else:
            self.cursor -= 1

    # ---- Selection ----
    def toggle_selected(self) -> None:
        """Toggle selection of the signal under the cursor."""
        name = self.current()
        if name is None:
            return
        if name in self.selected:
            self.selected.remove(name)
        else:
            self.selected.add(name)

    def select_all(self) -> None:
        """Select every signal matching the current query."""
        self.selected.update(self.filtered)

    def clear_selection(self) -> None:
        self.selected.clear()

    def selected_signals(self) -> List[str]:
        """Selected names in declaration order."""
        return [name for name in self.all_signals if name in self.selected]

    # ---- Filtering ----
    def score(self, name: str) -> Optional[float]:
        """Match score of name against the current query, or None if rejected."""
        if not self.query:
            return 100.0
        query = self.query.lower()
        name_lower = name.lower()
        if not is_subsequence(query, name_lower):
            return None
        score = fuzz.partial_ratio(query, name_lower)
        return score if score >= self.score_threshold else None

    def _update_filtered(self) -> None:
        if not self.query:
            self.filtered = list(self.all_signals)
        else:
            scored = []
            for name in self.all_signals:
                s = self.score(name)
                if s is not None:
                    scored.append((name, s))
            # Stable sort keeps declaration order among equal scores
            scored.sort(key=lambda item: item[1], reverse=True)
            self.filtered = [name for name, _ in scored]

        if not self.filtered:
            self.cursor = None
        elif self.cursor is None or self.cursor >= len(self.filtered):
            self.cursor = 0
