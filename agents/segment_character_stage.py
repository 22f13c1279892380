"""
Segment Character Stage: 세그먼트 하나에서 캐릭터 목록 추출.

Fails-soft: 어떤 경우에도 예외를 올리지 않고 (필요하면 fallback) 캐릭터 목록을 반환.
"""

from typing import List, Optional

from schemas import Character, Segment
from agents.generation_client import GenerationClient
from agents.fallback_synthesizer import FallbackSynthesizer
from agents.response_validator import ResponseValidator
from utils.error_manager import ErrorManager
from utils.logger import get_logger

logger = get_logger("segment_character_stage")


CHARACTER_PROMPT = """Analyze the following script segment and extract all characters mentioned in it.
For each character, provide a name, a detailed description, 3-5 personality traits, and their role in this specific segment.

Segment Title: {title}
Script Segment:
{content}

Theme: {theme}

Respond ONLY with a JSON array in this format:
[
  {{
    "name": "Character Name",
    "description": "A detailed description of the character",
    "traits": ["trait1", "trait2", "trait3"],
    "role": "Character's role in this segment (e.g. 'Protagonist', 'Supporting Character', 'Antagonist')"
  }}
]

If no characters are explicitly named in the segment, create appropriate characters that would fit this segment and theme."""


class SegmentCharacterStage:
    """
    GenerationClient + ResponseValidator + FallbackSynthesizer 조합.

    호출당 정확히 1회 generate_text 시도. 재시도는 호출자가 같은 입력으로
    다시 부르면 된다 (부작용 없음).
    """

    def __init__(
        self,
        client: GenerationClient,
        validator: Optional[ResponseValidator] = None,
        synthesizer: Optional[FallbackSynthesizer] = None,
    ):
        self.client = client
        self.validator = validator or ResponseValidator()
        self.synthesizer = synthesizer or FallbackSynthesizer()

    @staticmethod
    def build_prompt(segment: Segment, theme: str) -> str:
        return CHARACTER_PROMPT.format(
            title=segment.title,
            content=segment.content,
            theme=theme,
        )

    def fallback(self, segment: Segment, theme: str) -> List[Character]:
        return self.synthesizer.characters(segment.title, theme)

    def extract_characters(self, segment: Segment, theme: str) -> List[Character]:
        logger.info(f"Extracting characters from segment: {segment.title or segment.id}")

        try:
            raw = self.client.generate_text(self.build_prompt(segment, theme))
        except Exception as e:
            return self._degrade(segment, theme, "generation call failed", f"{type(e).__name__}: {e}")

        excerpt = str(raw or "")[:200]
        try:
            result = self.validator.characters(raw, theme)
        except Exception as e:
            return self._degrade(segment, theme, f"response check failed ({type(e).__name__})", excerpt)
        if not result.valid:
            return self._degrade(segment, theme, f"unusable response ({result.reason})", excerpt)

        logger.info(f"  {len(result.items)} characters extracted for {segment.id}")
        return result.items

    def _degrade(self, segment: Segment, theme: str, reason: str, details: str) -> List[Character]:
        ErrorManager.log_error(
            "SegmentCharacterStage",
            f"Using fallback characters for {segment.id}: {reason}",
            details,
            severity="warning",
        )
        return self.fallback(segment, theme)
