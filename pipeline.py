"""
ScriptReel 통합 파이프라인

세그먼트 단위 상태 머신으로 전체 실행 플로우를 관리.
모든 전이는 PipelineState 스냅샷을 받아 새 스냅샷을 반환한다 (입력은 변경하지 않음).

세그먼트당 실행 플로우:
1. SegmentCharacterStage - 캐릭터 추출 (실패 시 fallback)
2. PhotoSelectionStage - 캐릭터별 사진 후보 생성 + 선택
3. SegmentVideoStage - 영상 후보 생성 + 선택
4. complete / skip → 다음 세그먼트
종료 후:
5. CharacterDeduplicator - roster 병합
6. Compiler - 최종 출력 descriptor
"""

from typing import Iterable, List, Optional, Sequence

from dotenv import load_dotenv

from schemas import (
    CompilationResult,
    PhotoOption,
    PipelineSettings,
    PipelineStage,
    PipelineState,
    ProcessedSegment,
    Segment,
)
from agents.generation_client import GenerationClient
from agents.fallback_synthesizer import FallbackSynthesizer
from agents.response_validator import ResponseValidator
from agents.segment_character_stage import SegmentCharacterStage
from agents.photo_selection_stage import PhotoSelectionStage
from agents.segment_video_stage import SegmentVideoStage
from agents.character_deduplicator import CharacterDeduplicator
from agents.compiler import Compiler, ManifestCompiler
from utils.error_manager import ErrorManager
from utils.errors import PreconditionNotMet
from utils.logger import get_logger

logger = get_logger("pipeline")

_SEGMENT_STAGES = (
    PipelineStage.PENDING,
    PipelineStage.CHARACTERS_GENERATED,
    PipelineStage.PHOTOS_PENDING,
    PipelineStage.PHOTOS_COMPLETE,
    PipelineStage.VIDEOS_PENDING,
)


class PipelineOrchestrator:
    """
    ScriptReel 파이프라인 상태 머신

    허용되지 않은 stage에서 이벤트를 호출하면 PreconditionNotMet.
    호출자는 이전 스냅샷을 그대로 들고 있으면 되므로 롤백이 필요 없다.
    """

    def __init__(
        self,
        client: GenerationClient,
        settings: Optional[PipelineSettings] = None,
        character_stage: Optional[SegmentCharacterStage] = None,
        photo_stage: Optional[PhotoSelectionStage] = None,
        video_stage: Optional[SegmentVideoStage] = None,
        synthesizer: Optional[FallbackSynthesizer] = None,
        compiler: Optional[Compiler] = None,
    ):
        """
        Initialize pipeline.

        Args:
            client: GenerationClient (모든 스테이지가 공유, 전역 싱글톤 아님)
            settings: PipelineSettings (기본값: PipelineSettings())
            character_stage / photo_stage / video_stage: 스테이지 주입 (테스트용)
            synthesizer: FallbackSynthesizer
            compiler: Compiler (기본: ManifestCompiler)
        """
        self.settings = settings or PipelineSettings()
        self.synthesizer = synthesizer or FallbackSynthesizer()
        validator = ResponseValidator()

        self.character_stage = character_stage or SegmentCharacterStage(
            client, validator=validator, synthesizer=self.synthesizer
        )
        self.photo_stage = photo_stage or PhotoSelectionStage(
            client,
            validator=validator,
            synthesizer=self.synthesizer,
            max_workers=self.settings.max_workers,
            auto_select_first=self.settings.auto_select_first_photo,
        )
        self.video_stage = video_stage or SegmentVideoStage(
            client,
            validator=validator,
            synthesizer=self.synthesizer,
            option_count=self.settings.video_count,
        )
        self.compiler = compiler
        ErrorManager.configure(self.settings.error_log_path)

    # ------------------------------------------------------------------
    # 전이 공통
    # ------------------------------------------------------------------

    @staticmethod
    def _require(state: PipelineState, event: str, allowed: Sequence[PipelineStage]) -> Segment:
        state.check_invariants()
        if state.stage not in allowed:
            raise PreconditionNotMet(
                f"Cannot {event.replace('_', ' ')} while the pipeline is '{state.stage.value}'.",
                title="Invalid Step",
            )
        return state.current_segment

    @staticmethod
    def _transition(before: PipelineState, after: PipelineState, event: str) -> PipelineState:
        after.check_invariants()
        logger.info(
            f"[{event}] segment {before.current_segment_index + 1}/{before.total_segments}: "
            f"{before.stage.value} -> {after.stage.value}"
        )
        return after

    def _selected_photos(self, state: PipelineState) -> List[PhotoOption]:
        photos = []
        for character in state.current_characters:
            option = self.photo_stage.selected_option(state.photo_options_by_character_id.get(character.id))
            if option is not None:
                photos.append(option)
        return photos

    @staticmethod
    def _preset_photos(segment: Segment) -> List[PhotoOption]:
        """스크립트 단계에서 이미 지정된 사진 (Segment.photos)."""
        return [
            PhotoOption(id=f"{segment.id}-preset-{k}", url=url, selected=True)
            for k, url in enumerate(segment.photos or [])
        ]

    def _photo_stage_for(self, state: PipelineState, options_by_character) -> PipelineStage:
        if self.photo_stage.all_selected(state.current_characters, options_by_character):
            return PipelineStage.PHOTOS_COMPLETE
        return PipelineStage.PHOTOS_PENDING

    def _advance(self, state: PipelineState, processed: ProcessedSegment, via: PipelineStage) -> PipelineState:
        """ProcessedSegment append 후 Pending(i+1) 또는 Finished."""
        next_index = state.current_segment_index + 1
        next_stage = PipelineStage.FINISHED if next_index >= state.total_segments else PipelineStage.PENDING
        logger.debug(f"  segment {processed.segment_id} {via.value}")

        remaining_photos = {
            cid: options for cid, options in state.photo_options_by_character_id.items()
            if cid not in {character.id for character in state.current_characters}
        }
        return state.evolve(
            stage=next_stage,
            current_segment_index=next_index,
            current_characters=[],
            processed_segments=[*state.processed_segments, processed],
            photo_options_by_character_id=remaining_photos,
        )

    # ------------------------------------------------------------------
    # 이벤트
    # ------------------------------------------------------------------

    def start(self, segments: Iterable[Segment], theme: str, photo_style: Optional[str] = None) -> PipelineState:
        segments = list(segments)
        state = PipelineState(
            segments=segments,
            theme=theme,
            photo_style=photo_style or self.settings.photo_style,
            stage=PipelineStage.FINISHED if not segments else PipelineStage.PENDING,
        )
        logger.info(f"Pipeline started: {len(segments)} segments (theme: {theme}, style: {state.photo_style})")
        return state.check_invariants()

    def generate_characters(self, state: PipelineState) -> PipelineState:
        segment = self._require(
            state, "generate_characters",
            (PipelineStage.PENDING, PipelineStage.CHARACTERS_GENERATED),
        )
        characters = self.character_stage.extract_characters(segment, state.theme)

        # 재생성 시 이전 캐릭터의 사진 후보는 버린다
        stale = {character.id for character in state.current_characters}
        photo_options = {
            cid: options for cid, options in state.photo_options_by_character_id.items()
            if cid not in stale
        }
        return self._transition(state, state.evolve(
            stage=PipelineStage.CHARACTERS_GENERATED,
            current_characters=characters,
            photo_options_by_character_id=photo_options,
        ), "generate_characters")

    def generate_photos(self, state: PipelineState, count: Optional[int] = None) -> PipelineState:
        self._require(
            state, "generate_photos",
            (PipelineStage.CHARACTERS_GENERATED, PipelineStage.PHOTOS_PENDING, PipelineStage.PHOTOS_COMPLETE),
        )
        generated = self.photo_stage.generate_all(
            state.current_characters,
            state.photo_style,
            state.theme,
            count or self.settings.photo_count,
        )
        photo_options = {**state.photo_options_by_character_id, **generated}
        return self._transition(state, state.evolve(
            stage=self._photo_stage_for(state, photo_options),
            photo_options_by_character_id=photo_options,
        ), "generate_photos")

    def select_photo(self, state: PipelineState, character_id: str, photo_id: str) -> PipelineState:
        self._require(
            state, "select_photo",
            (PipelineStage.PHOTOS_PENDING, PipelineStage.PHOTOS_COMPLETE),
        )
        photo_options = self.photo_stage.select(state.photo_options_by_character_id, character_id, photo_id)
        return self._transition(state, state.evolve(
            stage=self._photo_stage_for(state, photo_options),
            photo_options_by_character_id=photo_options,
        ), "select_photo")

    def generate_videos(self, state: PipelineState) -> PipelineState:
        segment = self._require(
            state, "generate_videos",
            (PipelineStage.PHOTOS_COMPLETE, PipelineStage.VIDEOS_PENDING),
        )
        videos = self.video_stage.generate(
            segment,
            state.current_characters,
            self._selected_photos(state) or self._preset_photos(segment),
            state.theme,
        )
        return self._transition(state, state.evolve(
            stage=PipelineStage.VIDEOS_PENDING,
            segment_videos_by_segment_id={**state.segment_videos_by_segment_id, segment.id: videos},
        ), "generate_videos")

    def select_video(self, state: PipelineState, video_id: str) -> PipelineState:
        segment = self._require(state, "select_video", (PipelineStage.VIDEOS_PENDING,))
        options = state.segment_videos_by_segment_id.get(segment.id, [])
        selected = self.video_stage.select(options, video_id, segment.id)
        return self._transition(state, state.evolve(
            segment_videos_by_segment_id={**state.segment_videos_by_segment_id, segment.id: selected},
        ), "select_video")

    def complete_segment(self, state: PipelineState) -> PipelineState:
        segment = self._require(state, "complete_segment", (PipelineStage.VIDEOS_PENDING,))
        videos = state.segment_videos_by_segment_id.get(segment.id, [])
        if not videos:
            raise PreconditionNotMet(
                f"No videos were generated for '{segment.title or segment.id}'.",
                title="Videos Required",
            )
        chosen = self.video_stage.selected_option(videos)
        if chosen is None:
            raise PreconditionNotMet(
                f"Select one video for '{segment.title or segment.id}' before continuing.",
                title="Video Selection Required",
            )

        processed = ProcessedSegment(
            segment_id=segment.id,
            title=segment.title,
            content=segment.content,
            characters=self.photo_stage.attach_selected(
                state.current_characters, state.photo_options_by_character_id
            ),
            photos=self._selected_photos(state),
            videos=videos,
            selected_video_id=chosen.id,
        )
        return self._transition(
            state, self._advance(state, processed, PipelineStage.VIDEOS_COMPLETE), "complete_segment"
        )

    def skip_segment(self, state: PipelineState) -> PipelineState:
        segment = self._require(state, "skip_segment", _SEGMENT_STAGES)

        characters = state.current_characters
        if state.stage == PipelineStage.PENDING:
            characters = self.character_stage.fallback(segment, state.theme)

        processed = ProcessedSegment(
            segment_id=segment.id,
            title=segment.title,
            content=segment.content,
            characters=self.photo_stage.attach_selected(characters, state.photo_options_by_character_id),
            photos=self._selected_photos(state),
            videos=[],
            skipped=True,
        )
        return self._transition(
            state, self._advance(state, processed, PipelineStage.SKIPPED), "skip_segment"
        )

    def finish(self, state: PipelineState) -> PipelineState:
        """모든 세그먼트 처리 후 roster 병합 (이름 기준, 먼저 등장한 캐릭터 유지)."""
        self._require(state, "finish", (PipelineStage.FINISHED,))
        roster = CharacterDeduplicator.merge_segments(state.processed_segments)
        logger.info(f"Roster merged: {len(roster)} unique characters from {len(state.processed_segments)} segments")
        return self._transition(state, state.evolve(roster_characters=roster), "finish")

    def compile(self, state: PipelineState) -> CompilationResult:
        self._require(state, "compile", (PipelineStage.FINISHED,))
        roster = state.roster_characters or CharacterDeduplicator.merge_segments(state.processed_segments)
        compiler = self.compiler or ManifestCompiler(self.settings.output_dir, theme=state.theme)
        return compiler.compile(state.processed_segments, roster)

    # ------------------------------------------------------------------
    # 자동 실행
    # ------------------------------------------------------------------

    def run_segment(self, state: PipelineState) -> PipelineState:
        """
        현재 세그먼트를 끝까지 자동 진행.

        선택이 필요한 지점에서는 각 후보 목록의 첫 번째를 고른다.
        """
        state = self.generate_characters(state)
        state = self.generate_photos(state)
        for character in state.current_characters:
            options = state.photo_options_by_character_id.get(character.id) or []
            if options and self.photo_stage.selected_option(options) is None:
                state = self.select_photo(state, character.id, options[0].id)

        state = self.generate_videos(state)
        videos = state.segment_videos_by_segment_id[state.current_segment.id]
        state = self.select_video(state, videos[0].id)
        return self.complete_segment(state)

    def run(self, segments: Iterable[Segment], theme: str, photo_style: Optional[str] = None) -> CompilationResult:
        """전체 파이프라인 한 번에 실행 (자동 선택)."""
        state = self.start(segments, theme, photo_style)
        while not state.is_finished:
            state = self.run_segment(state)
        state = self.finish(state)
        return self.compile(state)


def run_pipeline(
    script_text: str,
    theme: str,
    photo_style: Optional[str] = None,
    client: Optional[GenerationClient] = None,
    config_path: Optional[str] = None,
) -> CompilationResult:
    """
    파이프라인 간편 실행 함수.

    Args:
        script_text: 전체 스크립트 (빈 줄로 세그먼트 구분)
        theme: 영상 테마
        photo_style: 사진 스타일 (기본: 설정값)
        client: GenerationClient (기본: OpenAIGenerationClient)
        config_path: 설정 파일 경로

    Returns:
        CompilationResult
    """
    # .env 파일 로드
    load_dotenv()

    from config import load_pipeline_config
    from agents.generation_client import OpenAIGenerationClient
    from utils.script_splitter import split_script, fill_empty_segments

    settings = load_pipeline_config(config_path)
    if client is None:
        client = OpenAIGenerationClient(text_model=settings.text_model, image_model=settings.image_model)

    segments = fill_empty_segments(split_script(script_text))
    if not segments:
        raise PreconditionNotMet("The script is empty.", title="Script Required")

    pipeline = PipelineOrchestrator(client, settings)
    return pipeline.run(segments, theme, photo_style)


if __name__ == "__main__":
    # 테스트 실행
    result = run_pipeline(
        script_text=(
            "A lone explorer wakes on a derelict starship.\n\n"
            "She finds the engineer hiding in the reactor bay.\n\n"
            "Together they restart the engines and head home."
        ),
        theme="scifi",
    )

    print(f"\nManifest: {result.manifest_path}")
    print(f"Clips: {len(result.clips)} (skipped: {len(result.skipped_segment_ids)})")
