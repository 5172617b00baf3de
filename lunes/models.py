from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from patterns import PatternId

STAGE_OPEN = "open login page"
STAGE_RESULT = "login result"
STAGE_EXCEPTION = "exception"
STAGE_CONFIGURATION = "configuration"


class RunContext(BaseModel):
    """Per-run inputs. Credentials stay wrapped so they never reach a log line."""

    model_config = ConfigDict(frozen=True)

    username: SecretStr
    password: SecretStr
    login_url: str


@dataclass(frozen=True)
class ObservedState:
    current_url: str
    matched_patterns: frozenset[PatternId] = field(default_factory=frozenset)
    error_text: Optional[str] = None  # first line that matched an error pattern


class DispositionKind(str, Enum):
    CHALLENGE = "challenge"
    SUCCESS = "success"
    FAILURE_KNOWN = "failure_known"
    FAILURE_UNKNOWN = "failure_unknown"
    ERROR = "error"
    CONFIGURATION_ERROR = "configuration_error"


EXIT_CODES = {
    DispositionKind.SUCCESS: 0,
    DispositionKind.FAILURE_KNOWN: 1,
    DispositionKind.FAILURE_UNKNOWN: 1,
    DispositionKind.ERROR: 1,
    DispositionKind.CONFIGURATION_ERROR: 1,
    DispositionKind.CHALLENGE: 2,
}


class NotificationEvent(BaseModel):
    ok: bool
    stage: str
    message: str = ""
    screenshot: Optional[Path] = None


class Disposition(BaseModel):
    """The single classified outcome of a run."""

    model_config = ConfigDict(frozen=True)

    kind: DispositionKind
    stage: str
    message: str
    reason: Optional[str] = None
    url: Optional[str] = None
    screenshot: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.kind == DispositionKind.SUCCESS

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]

    @classmethod
    def challenge(cls, url: Optional[str] = None) -> "Disposition":
        return cls(
            kind=DispositionKind.CHALLENGE,
            stage=STAGE_OPEN,
            message="Human verification page detected (Cloudflare/Turnstile); automation stopped.",
            url=url,
        )

    @classmethod
    def success(cls, url: str) -> "Disposition":
        return cls(
            kind=DispositionKind.SUCCESS,
            stage=STAGE_RESULT,
            message=f"Judged successful. Current URL: {url}",
            url=url,
        )

    @classmethod
    def failure_known(cls, reason: str, url: str) -> "Disposition":
        return cls(
            kind=DispositionKind.FAILURE_KNOWN,
            stage=STAGE_RESULT,
            message=f"Still on the login page, likely failed ({reason})",
            reason=reason,
            url=url,
        )

    @classmethod
    def failure_unknown(cls, url: str) -> "Disposition":
        return cls(
            kind=DispositionKind.FAILURE_UNKNOWN,
            stage=STAGE_RESULT,
            message="Still on the login page, likely failed (unrecognized page state, no error message captured)",
            url=url,
        )

    @classmethod
    def error(cls, message: str) -> "Disposition":
        return cls(kind=DispositionKind.ERROR, stage=STAGE_EXCEPTION, message=message)

    @classmethod
    def configuration_error(cls, message: str) -> "Disposition":
        return cls(kind=DispositionKind.CONFIGURATION_ERROR, stage=STAGE_CONFIGURATION, message=message)

    def with_screenshot(self, path: Optional[Path]) -> "Disposition":
        return self.model_copy(update={"screenshot": path})

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(ok=self.ok, stage=self.stage, message=self.message, screenshot=self.screenshot)
