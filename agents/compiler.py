"""
Compiler: 처리된 세그먼트 + roster → 최종 출력 descriptor.

실제 영상 합성은 외부 협력자 몫이다. 기본 구현(ManifestCompiler)은
세그먼트 순서대로 선택된 영상을 정리해 manifest.json으로 저장한다.
"""

import json
import os
from typing import List, Optional, Protocol, Sequence

from schemas import Character, CompilationResult, CompiledClip, ProcessedSegment, new_id
from utils.errors import PreconditionNotMet
from utils.logger import get_logger

logger = get_logger("compiler")


class Compiler(Protocol):
    def compile(
        self,
        processed_segments: Sequence[ProcessedSegment],
        roster: Sequence[Character],
    ) -> CompilationResult:
        ...


class ManifestCompiler:
    """Writes <output_dir>/<project_id>/manifest.json describing the final cut."""

    def __init__(self, output_dir: str = "outputs", theme: str = ""):
        self.output_dir = output_dir
        self.theme = theme

    def compile(
        self,
        processed_segments: Sequence[ProcessedSegment],
        roster: Sequence[Character],
        project_id: Optional[str] = None,
    ) -> CompilationResult:
        if not processed_segments:
            raise PreconditionNotMet("No processed segments available.", title="Nothing to Compile")

        project_id = project_id or new_id("project")
        clips: List[CompiledClip] = []
        for segment in processed_segments:
            video = segment.selected_video
            clips.append(CompiledClip(
                segment_id=segment.segment_id,
                title=segment.title,
                video_url=video.url if video else None,
                thumbnail_url=video.thumbnail_url if video else None,
                skipped=segment.skipped,
            ))

        result = CompilationResult(
            project_id=project_id,
            theme=self.theme,
            clips=clips,
            roster=list(roster),
            skipped_segment_ids=[s.segment_id for s in processed_segments if s.skipped],
        )
        result = result.model_copy(update={"manifest_path": self._save_manifest(result)})

        logger.info(
            f"Compiled {len(clips)} segments "
            f"({len(result.skipped_segment_ids)} skipped, {len(result.roster)} characters)"
        )
        return result

    def _save_manifest(self, result: CompilationResult) -> str:
        """
        CompilationResult를 JSON으로 저장.

        Returns:
            저장된 파일 경로
        """
        project_dir = os.path.join(self.output_dir, result.project_id)
        os.makedirs(project_dir, exist_ok=True)
        manifest_path = os.path.join(project_dir, "manifest.json")

        manifest_dict = result.model_dump(mode="json")
        manifest_dict["manifest_path"] = manifest_path

        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest_dict, f, ensure_ascii=False, indent=2)

        return manifest_path
