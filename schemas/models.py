"""
ScriptReel Data Models

공통 데이터 모델 정의 (Pydantic 기반)
- Segment: 스크립트 분할 단위 (불변)
- Character / PhotoOption / VideoOption: 스테이지 산출물
- ProcessedSegment: 세그먼트 처리 결과 (append-only)
- PipelineState: 스테이지 간 전달되는 누적 상태 (불변 스냅샷)
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator

from utils.constants import (
    MAX_TRAITS,
    DEFAULT_PHOTO_COUNT,
    DEFAULT_PHOTO_STYLE,
    DEFAULT_VIDEO_COUNT,
    MAX_VIDEO_OPTIONS,
    MODEL_TEXT_DEFAULT,
    MODEL_IMAGE_DEFAULT,
)
from utils.errors import PipelineInvariantError


def new_id(prefix: str = "") -> str:
    """Fresh unique id (uuid4 hex), optionally prefixed."""
    token = uuid.uuid4().hex
    return f"{prefix}-{token}" if prefix else token


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineStage(str, Enum):
    """파이프라인 상태 (세그먼트 단위 + 종료)"""
    PENDING = "pending"
    CHARACTERS_GENERATED = "characters_generated"
    PHOTOS_PENDING = "photos_pending"
    PHOTOS_COMPLETE = "photos_complete"
    VIDEOS_PENDING = "videos_pending"
    VIDEOS_COMPLETE = "videos_complete"
    SKIPPED = "skipped"
    FINISHED = "finished"


class OptionSource(str, Enum):
    """옵션 출처"""
    AI = "ai"
    FALLBACK = "fallback"


class Segment(BaseModel):
    """스크립트 세그먼트 (분할 후 불변)"""
    model_config = {"frozen": True}

    id: str = Field(..., description="세그먼트 ID (stable)")
    title: str = Field(default="", description="세그먼트 제목")
    content: str = Field(default="", description="원문 텍스트")
    photos: Optional[List[str]] = Field(default=None, description="사전 지정된 사진 URL")
    video_url: Optional[str] = Field(default=None, description="사전 지정된 영상 URL")


class Character(BaseModel):
    """캐릭터 (중복 판정 키: name)"""
    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id, description="생성 시 부여되는 고유 ID")
    name: str = Field(..., description="캐릭터 이름")
    description: str = Field(default="", description="캐릭터 설명")
    traits: List[str] = Field(default_factory=list, description="성격 특성 (최대 5개)")
    role: str = Field(default="Supporting Character", description="세그먼트 내 역할")
    image_url: Optional[str] = Field(default=None, description="선택된 사진 URL")

    @field_validator("traits")
    @classmethod
    def _cap_traits(cls, value: List[str]) -> List[str]:
        return list(value)[:MAX_TRAITS]

    def with_image(self, image_url: Optional[str]) -> "Character":
        """image_url만 붙인 사본 반환 (유일하게 허용되는 변경)."""
        return self.model_copy(update={"image_url": image_url})


class PhotoOption(BaseModel):
    """캐릭터 사진 후보"""
    model_config = {"frozen": True}

    id: str
    url: str
    style: str = DEFAULT_PHOTO_STYLE
    selected: bool = False
    source: OptionSource = OptionSource.AI
    prompt: Optional[str] = None


class VideoOption(BaseModel):
    """세그먼트 영상 후보"""
    model_config = {"frozen": True}

    id: str
    url: str
    thumbnail_url: str
    selected: bool = False
    source: OptionSource = OptionSource.AI
    duration_sec: Optional[float] = None


class ProcessedSegment(BaseModel):
    """세그먼트 처리 결과 (PipelineState에 append된 후 불변)"""
    model_config = {"frozen": True}

    segment_id: str
    title: str
    content: str
    characters: List[Character] = Field(default_factory=list)
    photos: List[PhotoOption] = Field(default_factory=list, description="캐릭터별 선택된 사진")
    videos: List[VideoOption] = Field(default_factory=list)
    selected_video_id: Optional[str] = None
    skipped: bool = False
    processed_at: datetime = Field(default_factory=utcnow)

    @property
    def selected_video(self) -> Optional[VideoOption]:
        for option in self.videos:
            if option.id == self.selected_video_id:
                return option
        return None


class PipelineSettings(BaseModel):
    """파이프라인 설정 (config/pipeline.yaml + 환경변수)"""
    photo_count: int = Field(default=DEFAULT_PHOTO_COUNT, ge=1, description="캐릭터당 사진 후보 수")
    photo_style: str = Field(default=DEFAULT_PHOTO_STYLE, description="기본 사진 스타일")
    video_count: int = Field(
        default=DEFAULT_VIDEO_COUNT, ge=1, le=MAX_VIDEO_OPTIONS,
        description="세그먼트당 영상 후보 수"
    )
    max_workers: int = Field(default=4, ge=1, description="사진 병렬 생성 워커 수")
    auto_select_first_photo: bool = Field(
        default=False,
        description="AI 사진 후보의 첫 번째를 자동 선택"
    )
    output_dir: str = Field(default="outputs", description="출력 기본 디렉토리")
    error_log_path: str = Field(default="outputs/generation_errors.log")
    text_model: str = Field(default=MODEL_TEXT_DEFAULT)
    image_model: str = Field(default=MODEL_IMAGE_DEFAULT)


class PipelineState(BaseModel):
    """
    스테이지 간 전달되는 누적 상태.

    불변 스냅샷: 모든 전이는 model_copy(update=...)로 새 상태를 만든다.
    Checkpoint 불변식: len(processed_segments) == current_segment_index
    """
    model_config = {"frozen": True}

    segments: List[Segment] = Field(default_factory=list)
    theme: str = ""
    photo_style: str = DEFAULT_PHOTO_STYLE
    stage: PipelineStage = PipelineStage.PENDING
    current_segment_index: int = 0
    current_characters: List[Character] = Field(default_factory=list)
    processed_segments: List[ProcessedSegment] = Field(default_factory=list)
    roster_characters: List[Character] = Field(default_factory=list)
    photo_options_by_character_id: Dict[str, List[PhotoOption]] = Field(default_factory=dict)
    segment_videos_by_segment_id: Dict[str, List[VideoOption]] = Field(default_factory=dict)

    @property
    def total_segments(self) -> int:
        return len(self.segments)

    @property
    def current_segment(self) -> Optional[Segment]:
        if 0 <= self.current_segment_index < len(self.segments):
            return self.segments[self.current_segment_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.stage == PipelineStage.FINISHED

    def evolve(self, **changes) -> "PipelineState":
        return self.model_copy(update=changes)

    def check_invariants(self) -> "PipelineState":
        """Checkpoint 불변식 검사. 위반 시 PipelineInvariantError (복구 불가)."""
        processed = len(self.processed_segments)
        if processed != self.current_segment_index:
            raise PipelineInvariantError(
                f"processed_segments has {processed} entries but current_segment_index is "
                f"{self.current_segment_index}"
            )
        if self.current_segment_index > self.total_segments:
            raise PipelineInvariantError(
                f"current_segment_index {self.current_segment_index} exceeds {self.total_segments} segments"
            )
        for index, done in enumerate(self.processed_segments):
            if done.segment_id != self.segments[index].id:
                raise PipelineInvariantError(
                    f"processed segment #{index} is '{done.segment_id}', expected '{self.segments[index].id}'"
                )
        names = [character.name for character in self.roster_characters]
        if len(names) != len(set(names)):
            raise PipelineInvariantError("roster_characters contains duplicate names")
        if (self.stage == PipelineStage.FINISHED) != (self.current_segment_index == self.total_segments):
            raise PipelineInvariantError(
                f"stage {self.stage.value} inconsistent with segment {self.current_segment_index}/{self.total_segments}"
            )
        return self


class CompiledClip(BaseModel):
    """최종 합성 입력 클립"""
    segment_id: str
    title: str
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    skipped: bool = False


class CompilationResult(BaseModel):
    """최종 출력 descriptor"""
    project_id: str
    theme: str = ""
    clips: List[CompiledClip] = Field(default_factory=list)
    roster: List[Character] = Field(default_factory=list)
    skipped_segment_ids: List[str] = Field(default_factory=list)
    manifest_path: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
