"""Outcome classification for the login flow.

Everything here is a pure function of the observed page state, so the
decision list can be exercised without a browser.
"""
from typing import Optional

from models import Disposition, ObservedState
from patterns import (
    ALL_PATTERNS,
    CHALLENGE_IDS,
    ERROR_IDS,
    ERROR_PATTERNS,
    LOGIN_PATH_PATTERN,
    PHRASES,
    SUCCESS_IDS,
)


def _lines(page_text: str) -> list[str]:
    return [line.strip() for line in page_text.splitlines() if line.strip()]


def observe(url: str, page_text: str) -> ObservedState:
    """Snapshot which patterns match the rendered page text."""
    matched = frozenset(pid for pid, pattern in ALL_PATTERNS if pattern.search(page_text))

    error_text = None
    if matched & ERROR_IDS:
        for line in _lines(page_text):
            if any(pattern.search(line) for _, pattern in ERROR_PATTERNS):
                error_text = line
                break

    return ObservedState(current_url=url, matched_patterns=matched, error_text=error_text)


def is_challenge(state: ObservedState) -> bool:
    return bool(state.matched_patterns & CHALLENGE_IDS)


def left_login_page(state: ObservedState) -> bool:
    return LOGIN_PATH_PATTERN.search(state.current_url) is None


def has_success_text(state: ObservedState) -> bool:
    return bool(state.matched_patterns & SUCCESS_IDS)


def classify_landing(state: ObservedState) -> Optional[Disposition]:
    """Check run right after navigation. Returns a challenge or None."""
    if is_challenge(state):
        return Disposition.challenge(url=state.current_url)
    return None


def classify_outcome(state: ObservedState) -> Disposition:
    """Check run after submitting the form."""
    # Either signal is enough. A "Logout" string on an error page would
    # count as success too.
    if left_login_page(state) or has_success_text(state):
        return Disposition.success(state.current_url)

    matched_errors = [pid for pid, _ in ERROR_PATTERNS if pid in state.matched_patterns]
    if matched_errors:
        reason = state.error_text or PHRASES[matched_errors[0]]
        return Disposition.failure_known(reason, state.current_url)

    return Disposition.failure_unknown(state.current_url)


def classify(state: ObservedState) -> Disposition:
    return classify_landing(state) or classify_outcome(state)
