"""
Segment Video Stage: 세그먼트 캐릭터 + 선택된 사진 → 영상 후보 생성 및 선택.
"""

from typing import List, Optional, Sequence

from schemas import Character, PhotoOption, Segment, VideoOption, OptionSource
from agents.generation_client import GenerationClient
from agents.fallback_synthesizer import FallbackSynthesizer
from agents.response_validator import ResponseValidator
from utils.constants import DEFAULT_VIDEO_COUNT, MAX_VIDEO_OPTIONS
from utils.error_manager import ErrorManager
from utils.errors import MissingPrerequisite, NotFound
from utils.logger import get_logger

logger = get_logger("segment_video_stage")


class SegmentVideoStage:
    """
    영상 후보 생성 (최대 MAX_VIDEO_OPTIONS개).

    사진이 없으면 MissingPrerequisite. AI 실패 시 고정 풀에서 결정적으로 선택.
    생성된 후보는 선택되지 않은 상태로 반환된다.
    """

    def __init__(
        self,
        client: GenerationClient,
        validator: Optional[ResponseValidator] = None,
        synthesizer: Optional[FallbackSynthesizer] = None,
        option_count: int = DEFAULT_VIDEO_COUNT,
    ):
        self.client = client
        self.validator = validator or ResponseValidator()
        self.synthesizer = synthesizer or FallbackSynthesizer()
        self.option_count = max(1, min(option_count, MAX_VIDEO_OPTIONS))

    @staticmethod
    def build_prompt(segment: Segment, characters: Sequence[Character], theme: str) -> str:
        cast = ", ".join(f"{c.name} ({c.role})" for c in characters) or "no named characters"
        return (
            f"Short {theme} video scene titled \"{segment.title}\". "
            f"Characters: {cast}. Scene: {segment.content}"
        )

    def generate(
        self,
        segment: Segment,
        characters: Sequence[Character],
        photos: Sequence[PhotoOption],
        theme: str,
    ) -> List[VideoOption]:
        if not photos:
            raise MissingPrerequisite(
                f"Generate and select character photos for '{segment.title or segment.id}' before creating videos.",
                title="Photos Required",
            )

        photo_urls = [photo.url for photo in photos]
        request = {
            "kind": "video",
            "prompt": self.build_prompt(segment, characters, theme),
            "image_urls": photo_urls,
            "count": self.option_count,
        }
        logger.info(f"Generating videos for segment: {segment.title or segment.id} ({len(photo_urls)} photos)")

        try:
            raw = self.client.generate_media(request)
        except Exception as e:
            return self._degrade(segment, characters, photo_urls, theme, "generation call failed", f"{type(e).__name__}: {e}")

        excerpt = str(raw or "")[:200]
        try:
            result = self.validator.media_set(raw, limit=self.option_count)
        except Exception as e:
            return self._degrade(segment, characters, photo_urls, theme, f"response check failed ({type(e).__name__})", excerpt)
        if not result.valid:
            return self._degrade(segment, characters, photo_urls, theme, f"unusable response ({result.reason})", excerpt)

        return [
            VideoOption(
                id=f"{segment.id}-ai-video-{k}",
                url=item.url,
                thumbnail_url=item.thumbnail_url or photo_urls[k % len(photo_urls)],
                source=OptionSource.AI,
            )
            for k, item in enumerate(result.items)
        ]

    def _degrade(self, segment, characters, photo_urls, theme, reason, details) -> List[VideoOption]:
        ErrorManager.log_error(
            "SegmentVideoStage",
            f"Using fallback videos for {segment.id}: {reason}",
            details,
            severity="warning",
        )
        return self.synthesizer.video_options(
            segment.id,
            character_count=len(characters),
            theme=theme,
            photo_urls=photo_urls,
            count=self.option_count,
        )

    @staticmethod
    def select(options: Sequence[VideoOption], video_id: str, segment_id: str = "segment") -> List[VideoOption]:
        """video_id만 selected=True. 새 목록 반환."""
        if not any(option.id == video_id for option in options):
            raise NotFound("video", video_id, f"segment {segment_id}")
        return [option.model_copy(update={"selected": option.id == video_id}) for option in options]

    @staticmethod
    def selected_option(options: Sequence[VideoOption]) -> Optional[VideoOption]:
        chosen = [option for option in options if option.selected]
        return chosen[0] if len(chosen) == 1 else None
