"""Fixed text-pattern tables used to classify the login page.

Each table is an ordered list of ``(PatternId, compiled regex)`` pairs. All
patterns are case-insensitive and matched as substrings of rendered text.
"""
import re
from enum import Enum


class PatternId(str, Enum):
    # Human-verification interstitials
    VERIFY_HUMAN = "verify_human"
    NEEDS_VERIFICATION_ZH = "needs_verification_zh"
    SECURITY_CHECK = "security_check"
    SECURITY_CHECK_ZH = "security_check_zh"
    REVIEW_SECURITY = "review_security"

    # Authenticated area
    DASHBOARD = "dashboard"
    LOGOUT = "logout"
    SIGN_OUT = "sign_out"
    CONSOLE_ZH = "console_zh"
    PANEL_ZH = "panel_zh"

    # Login errors
    INVALID = "invalid"
    INCORRECT = "incorrect"
    ERROR_ZH = "error_zh"
    FAILED_ZH = "failed_zh"
    INVALID_ZH = "invalid_zh"


# Literal phrase behind each pattern, also used in messages
PHRASES: dict[PatternId, str] = {
    PatternId.VERIFY_HUMAN: "Verify you are human",
    PatternId.NEEDS_VERIFICATION_ZH: "需要验证",
    PatternId.SECURITY_CHECK: "security check",
    PatternId.SECURITY_CHECK_ZH: "安全检查",
    PatternId.REVIEW_SECURITY: "review the security",

    PatternId.DASHBOARD: "Dashboard",
    PatternId.LOGOUT: "Logout",
    PatternId.SIGN_OUT: "Sign out",
    PatternId.CONSOLE_ZH: "控制台",
    PatternId.PANEL_ZH: "面板",

    PatternId.INVALID: "Invalid",
    PatternId.INCORRECT: "incorrect",
    PatternId.ERROR_ZH: "错误",
    PatternId.FAILED_ZH: "失败",
    PatternId.INVALID_ZH: "无效",
}


def _table(*ids: PatternId) -> list[tuple[PatternId, re.Pattern]]:
    return [(pid, re.compile(re.escape(PHRASES[pid]), re.IGNORECASE)) for pid in ids]


CHALLENGE_PATTERNS = _table(
    PatternId.VERIFY_HUMAN,
    PatternId.NEEDS_VERIFICATION_ZH,
    PatternId.SECURITY_CHECK,
    PatternId.SECURITY_CHECK_ZH,
    PatternId.REVIEW_SECURITY,
)

SUCCESS_PATTERNS = _table(
    PatternId.DASHBOARD,
    PatternId.LOGOUT,
    PatternId.SIGN_OUT,
    PatternId.CONSOLE_ZH,
    PatternId.PANEL_ZH,
)

ERROR_PATTERNS = _table(
    PatternId.INVALID,
    PatternId.INCORRECT,
    PatternId.ERROR_ZH,
    PatternId.FAILED_ZH,
    PatternId.INVALID_ZH,
)

ALL_PATTERNS = CHALLENGE_PATTERNS + SUCCESS_PATTERNS + ERROR_PATTERNS

CHALLENGE_IDS = frozenset(pid for pid, _ in CHALLENGE_PATTERNS)
SUCCESS_IDS = frozenset(pid for pid, _ in SUCCESS_PATTERNS)
ERROR_IDS = frozenset(pid for pid, _ in ERROR_PATTERNS)

# Still on the login form while the URL path matches this
LOGIN_PATH_PATTERN = re.compile(r"/auth/login", re.IGNORECASE)
