"""
Photo Selection Stage: 캐릭터별 사진 후보 생성 및 선택.

- generate: 캐릭터 1명 → generate_media 1회 → PhotoOption 목록 (실패 시 fallback)
- generate_all: 캐릭터별 병렬 생성, 한 캐릭터 실패는 그 캐릭터만 fallback
- select: 상호 배타 선택 (새 map 반환)
- all_selected: 모든 캐릭터가 정확히 1개 선택을 가졌는지
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional

from schemas import Character, PhotoOption, OptionSource
from agents.generation_client import GenerationClient
from agents.fallback_synthesizer import FallbackSynthesizer
from agents.response_validator import ResponseValidator
from utils.constants import (
    DEFAULT_PHOTO_COUNT,
    PHOTO_WIDTH,
    PHOTO_HEIGHT,
    STYLE_PROMPTS,
    DEFAULT_STYLE_PROMPT,
)
from utils.error_manager import ErrorManager
from utils.errors import NotFound
from utils.logger import get_logger

logger = get_logger("photo_selection_stage")

PhotoOptionsMap = Dict[str, List[PhotoOption]]


class PhotoSelectionStage:
    """
    캐릭터 사진 후보 생성/선택.

    AI 후보는 auto_select_first=True일 때만 첫 번째가 선택된 상태로 나온다.
    fallback 후보는 항상 index 0 선택.
    """

    def __init__(
        self,
        client: GenerationClient,
        validator: Optional[ResponseValidator] = None,
        synthesizer: Optional[FallbackSynthesizer] = None,
        max_workers: int = 4,
        auto_select_first: bool = False,
    ):
        self.client = client
        self.validator = validator or ResponseValidator()
        self.synthesizer = synthesizer or FallbackSynthesizer()
        self.max_workers = max_workers
        self.auto_select_first = auto_select_first

    @staticmethod
    def build_prompt(character: Character, style: str, theme: str) -> str:
        prompt = f"Portrait photograph of {character.name}"
        if character.description:
            prompt += f", {character.description.rstrip('.').lower()}"
        if character.traits:
            prompt += f", with a {', '.join(character.traits[:3]).lower()} appearance"
        prompt += f", {STYLE_PROMPTS.get(style, DEFAULT_STYLE_PROMPT)}"
        prompt += f", styled for a {theme} video"
        return prompt + ", high resolution, professional lighting, sharp focus"

    def generate(
        self,
        character: Character,
        style: str,
        theme: str,
        count: int = DEFAULT_PHOTO_COUNT,
    ) -> List[PhotoOption]:
        prompt = self.build_prompt(character, style, theme)
        request = {
            "kind": "image",
            "prompt": prompt,
            "style": style,
            "count": count,
            "width": PHOTO_WIDTH,
            "height": PHOTO_HEIGHT,
        }

        try:
            raw = self.client.generate_media(request)
        except Exception as e:
            return self._degrade(character, style, count, "generation call failed", f"{type(e).__name__}: {e}")

        excerpt = str(raw or "")[:200]
        try:
            result = self.validator.media_set(raw, limit=count)
        except Exception as e:
            return self._degrade(character, style, count, f"response check failed ({type(e).__name__})", excerpt)
        if not result.valid:
            return self._degrade(character, style, count, f"unusable response ({result.reason})", excerpt)

        logger.debug(f"  {len(result.items)} AI photos for {character.name}")
        return [
            PhotoOption(
                id=f"{character.id}-photo-{index}",
                url=item.url,
                style=style,
                selected=self.auto_select_first and index == 0,
                source=OptionSource.AI,
                prompt=prompt,
            )
            for index, item in enumerate(result.items)
        ]

    def _degrade(self, character: Character, style: str, count: int, reason: str, details: str) -> List[PhotoOption]:
        ErrorManager.log_error(
            "PhotoSelectionStage",
            f"Using fallback photos for {character.name} ({character.id}): {reason}",
            details,
            severity="warning",
        )
        return self.synthesizer.photo_options(character.id, style, count)

    def generate_all(
        self,
        characters: Iterable[Character],
        style: str,
        theme: str,
        count: int = DEFAULT_PHOTO_COUNT,
    ) -> PhotoOptionsMap:
        """캐릭터별 병렬 생성. 각 워커는 자기 character_id 키에만 기록."""
        characters = list(characters)
        if not characters:
            return {}

        logger.info(f"Generating photos for {len(characters)} characters (style: {style})")
        results: PhotoOptionsMap = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(characters))) as executor:
            futures = {
                executor.submit(self.generate, character, style, theme, count): character
                for character in characters
            }
            for future in as_completed(futures):
                results[futures[future].id] = future.result()

        # 입력 순서로 정렬
        return {character.id: results[character.id] for character in characters}

    @staticmethod
    def select(options_by_character: PhotoOptionsMap, character_id: str, photo_id: str) -> PhotoOptionsMap:
        """photo_id만 selected=True, 같은 캐릭터의 나머지는 False. 새 map 반환."""
        options = options_by_character.get(character_id)
        if not options:
            raise NotFound("photo options", character_id, "character")
        if not any(option.id == photo_id for option in options):
            raise NotFound("photo", photo_id, f"character {character_id}")

        updated = dict(options_by_character)
        updated[character_id] = [
            option.model_copy(update={"selected": option.id == photo_id})
            for option in options
        ]
        return updated

    @staticmethod
    def selected_option(options: Optional[List[PhotoOption]]) -> Optional[PhotoOption]:
        chosen = [option for option in options or [] if option.selected]
        return chosen[0] if len(chosen) == 1 else None

    @classmethod
    def all_selected(cls, characters: Iterable[Character], options_by_character: PhotoOptionsMap) -> bool:
        return all(
            cls.selected_option(options_by_character.get(character.id)) is not None
            for character in characters
        )

    @classmethod
    def attach_selected(cls, characters: Iterable[Character], options_by_character: PhotoOptionsMap) -> List[Character]:
        """선택된 사진 URL을 image_url로 붙인 캐릭터 사본 목록."""
        attached = []
        for character in characters:
            option = cls.selected_option(options_by_character.get(character.id))
            attached.append(character.with_image(option.url) if option else character)
        return attached
