"""
ScriptReel Agents Package

스테이지 기반 아키텍처:
- SegmentCharacterStage: 세그먼트별 캐릭터 추출 (fails-soft)
- PhotoSelectionStage: 캐릭터 사진 후보 생성/선택
- SegmentVideoStage: 세그먼트 영상 후보 생성/선택
- CharacterDeduplicator: 이름 기준 roster 병합
- FallbackSynthesizer: AI 실패 시 결정적 기본 데이터
- ResponseValidator: 모델 응답 → 타입 검증
- ManifestCompiler: 최종 출력 descriptor 저장
"""

from .generation_client import GenerationClient, GenerationError, OpenAIGenerationClient
from .fallback_synthesizer import FallbackSynthesizer
from .response_validator import ResponseValidator, DecodeResult, MediaItem
from .segment_character_stage import SegmentCharacterStage
from .photo_selection_stage import PhotoSelectionStage
from .segment_video_stage import SegmentVideoStage
from .character_deduplicator import CharacterDeduplicator
from .compiler import Compiler, ManifestCompiler

__all__ = [
    "GenerationClient",
    "GenerationError",
    "OpenAIGenerationClient",
    "FallbackSynthesizer",
    "ResponseValidator",
    "DecodeResult",
    "MediaItem",
    "SegmentCharacterStage",
    "PhotoSelectionStage",
    "SegmentVideoStage",
    "CharacterDeduplicator",
    "Compiler",
    "ManifestCompiler",
]
