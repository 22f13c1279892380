"""
Fallback Synthesizer: AI 호출이 불가/실패했을 때 사용할 결정적(deterministic) 기본 데이터.

- 캐릭터: 테마 키워드 → 주인공 + 조연 2명
- 사진: characterId + index 기반 seed URL
- 영상: 고정 후보 풀에서 (캐릭터 수 + 테마 길이) % 풀 크기 위치부터 선택

I/O 없음. 같은 입력이면 같은 결과 (캐릭터 id만 매번 새로 발급).
"""

import re
from typing import List, Sequence, Tuple

from schemas import Character, PhotoOption, VideoOption, OptionSource
from utils.constants import (
    THEME_CHARACTER_NAMES,
    DEFAULT_CHARACTER_NAMES,
    PROTAGONIST_TRAITS,
    SUPPORTING_TRAITS,
    ROLE_PROTAGONIST,
    ROLE_SUPPORTING,
    FALLBACK_PHOTO_URL,
    FALLBACK_THUMBNAIL_URL,
    FALLBACK_VIDEO_POOL,
    FALLBACK_VIDEO_DURATION_SEC,
)


def _seed(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", value)


class FallbackSynthesizer:
    """Deterministic stand-ins for Characters, PhotoOptions and VideoOptions."""

    def __init__(self, video_pool: Sequence[str] = tuple(FALLBACK_VIDEO_POOL)):
        if not video_pool:
            raise ValueError("video_pool must not be empty")
        self.video_pool = list(video_pool)

    @staticmethod
    def character_names(theme: str) -> Tuple[str, str]:
        """테마 키워드 매칭 (대소문자 무시, 테이블 순서대로 첫 매칭)."""
        theme_lower = (theme or "").lower()
        for keywords, names in THEME_CHARACTER_NAMES:
            if any(keyword in theme_lower for keyword in keywords):
                return names
        return DEFAULT_CHARACTER_NAMES

    def characters(self, segment_title: str, theme: str) -> List[Character]:
        protagonist_name, supporting_name = self.character_names(theme)
        return [
            Character(
                name=protagonist_name,
                description=(
                    f'A main character in the "{segment_title}" segment '
                    f"with a unique perspective on the {theme} theme."
                ),
                traits=list(PROTAGONIST_TRAITS),
                role=ROLE_PROTAGONIST,
            ),
            Character(
                name=supporting_name,
                description=(
                    f'A supporting character in the "{segment_title}" segment '
                    f"who adds depth to the {theme} theme."
                ),
                traits=list(SUPPORTING_TRAITS),
                role=ROLE_SUPPORTING,
            ),
        ]

    @staticmethod
    def photo_url(character_id: str, index: int) -> str:
        return FALLBACK_PHOTO_URL.format(seed=f"{_seed(character_id)}-{index}")

    def photo_options(self, character_id: str, style: str, count: int) -> List[PhotoOption]:
        """count개 사진 후보. 첫 번째가 선택된 상태로 반환."""
        return [
            PhotoOption(
                id=f"{character_id}-photo-{index}",
                url=self.photo_url(character_id, index),
                style=style,
                selected=(index == 0),
                source=OptionSource.FALLBACK,
            )
            for index in range(count)
        ]

    def video_start_index(self, character_count: int, theme: str) -> int:
        return (character_count + len(theme or "")) % len(self.video_pool)

    def video_options(
        self,
        segment_id: str,
        character_count: int,
        theme: str,
        photo_urls: Sequence[str],
        count: int,
    ) -> List[VideoOption]:
        """고정 풀에서 결정적으로 count개 영상 후보 선택 (선택 상태 없음)."""
        start = self.video_start_index(character_count, theme)
        options = []
        for k in range(count):
            if photo_urls:
                thumbnail = photo_urls[k % len(photo_urls)]
            else:
                thumbnail = FALLBACK_THUMBNAIL_URL.format(seed=f"{_seed(segment_id)}-video-{k}")
            options.append(VideoOption(
                id=f"{segment_id}-video-{k}",
                url=self.video_pool[(start + k) % len(self.video_pool)],
                thumbnail_url=thumbnail,
                source=OptionSource.FALLBACK,
                duration_sec=FALLBACK_VIDEO_DURATION_SEC,
            ))
        return options
