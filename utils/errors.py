"""
ScriptReel 예외 계층

- TransientGenerationFailure: AI 호출/파싱 실패 (스테이지 내부에서 fallback 처리, 로그만 남김)
- PreconditionNotMet: 진행 조건 미충족 (사용자에게 경고, 상태 유지)
- NotFound: 존재하지 않는 photo/video/character id 선택
- PipelineInvariantError: 상태 불변식 위반 (복구 불가, 즉시 중단)
"""


class ScriptReelError(Exception):
    """Base class for pipeline errors."""


class TransientGenerationFailure(ScriptReelError):
    """A generation call failed or returned something unusable."""

    def __init__(self, stage: str, reason: str):
        super().__init__(f"[{stage}] {reason}")
        self.stage = stage
        self.reason = reason


class PreconditionNotMet(ScriptReelError):
    """The requested transition is blocked until the caller supplies more data."""

    def __init__(self, message: str, title: str = "Action Required"):
        super().__init__(message)
        self.title = title
        self.message = message


class MissingPrerequisite(PreconditionNotMet):
    """An earlier stage (e.g. photo selection) has not produced its output yet."""

    def __init__(self, message: str, title: str = "Prerequisite Missing"):
        super().__init__(message, title=title)


class NotFound(ScriptReelError):
    """Selection target does not exist for the given character or segment."""

    def __init__(self, kind: str, target_id: str, scope: str):
        super().__init__(f"{kind} '{target_id}' not found for {scope}")
        self.kind = kind
        self.target_id = target_id
        self.scope = scope


class PipelineInvariantError(ScriptReelError):
    """PipelineState is corrupted; the pipeline must not continue."""
