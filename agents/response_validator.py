"""
Response Validator: GenerationClient 응답을 스테이지별 기대 형태로 검증/디코딩.

결과는 태그된 DecodeResult (valid / invalid + reason).
누락 필드 기본값 치환은 여기서만 수행한다.
"""

import json
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from schemas import Character
from utils.constants import (
    MAX_TRAITS,
    DEFAULT_CHARACTER_NAME,
    DEFAULT_CHARACTER_ROLE,
    DEFAULT_TRAITS,
    DEFAULT_DESCRIPTION_TEMPLATE,
)
from utils.llm_utils import parse_llm_json, strip_code_fence

T = TypeVar("T")


class DecodeResult(BaseModel, Generic[T]):
    """Valid(items) / Invalid(reason)"""
    valid: bool
    items: List[T] = Field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def ok(cls, items: List[T]) -> "DecodeResult[T]":
        return cls(valid=True, items=items)

    @classmethod
    def invalid(cls, reason: str) -> "DecodeResult[T]":
        return cls(valid=False, reason=reason)


class MediaItem(BaseModel):
    url: str
    thumbnail_url: Optional[str] = None


def _is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower().startswith(("http://", "https://"))


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ResponseValidator:
    """Schema-validated decode step for every generation stage."""

    def _decode_array(self, raw: Optional[str]) -> DecodeResult[Any]:
        if raw is None or not raw.strip():
            return DecodeResult.invalid("empty response")
        try:
            data = parse_llm_json(raw)
        except json.JSONDecodeError as e:
            return DecodeResult.invalid(f"not JSON: {e.msg}")
        except (ValueError, RecursionError) as e:
            # 과도한 중첩 등 json 모듈이 디코딩을 포기한 경우
            return DecodeResult.invalid(f"undecodable JSON ({type(e).__name__})")
        if not isinstance(data, list):
            return DecodeResult.invalid(f"expected a JSON array, got {type(data).__name__}")
        if not data:
            return DecodeResult.invalid("empty array")
        return DecodeResult.ok(data)

    def characters(self, raw: Optional[str], theme: str) -> DecodeResult[Character]:
        """
        캐릭터 목록 디코딩.

        - 빈 응답 / JSON 아님 / 비어있는 배열 아님 → invalid
        - 각 원소는 기본값 치환 후 Character로 변환, id는 항상 새로 발급
        """
        decoded = self._decode_array(raw)
        if not decoded.valid:
            return DecodeResult.invalid(decoded.reason)

        characters = []
        for entry in decoded.items:
            if not isinstance(entry, dict):
                entry = {}
            characters.append(self._character_from_dict(entry, theme))
        return DecodeResult.ok(characters)

    @staticmethod
    def _character_from_dict(entry: Dict[str, Any], theme: str) -> Character:
        traits = entry.get("traits")
        if isinstance(traits, list):
            traits = [str(t) for t in traits[:MAX_TRAITS]]
        else:
            traits = list(DEFAULT_TRAITS)

        return Character(
            name=_text(entry.get("name")) or DEFAULT_CHARACTER_NAME,
            description=_text(entry.get("description")) or DEFAULT_DESCRIPTION_TEMPLATE.format(theme=theme),
            traits=traits,
            role=_text(entry.get("role")) or DEFAULT_CHARACTER_ROLE,
        )

    def media_set(self, raw: Optional[str], limit: int) -> DecodeResult[MediaItem]:
        """
        사진/영상 URL 세트 디코딩.

        허용 형태: 단일 URL 문자열, URL 문자열 배열, {"url", "thumbnailUrl"} 객체 배열.
        http(s) URL만 채택하며 limit 개수로 자른다.
        """
        if raw is None or not raw.strip():
            return DecodeResult.invalid("empty response")

        text = strip_code_fence(raw)
        if _is_http_url(text) and not text.startswith("["):
            return DecodeResult.ok([MediaItem(url=text)])

        decoded = self._decode_array(text)
        if not decoded.valid:
            return DecodeResult.invalid(decoded.reason)

        items = []
        for entry in decoded.items:
            if _is_http_url(entry):
                items.append(MediaItem(url=entry.strip()))
            elif isinstance(entry, dict) and _is_http_url(entry.get("url")):
                thumbnail = entry.get("thumbnailUrl") or entry.get("thumbnail_url")
                items.append(MediaItem(
                    url=entry["url"].strip(),
                    thumbnail_url=thumbnail if _is_http_url(thumbnail) else None,
                ))

        if not items:
            return DecodeResult.invalid("no usable http(s) URLs in response")
        return DecodeResult.ok(items[:limit])
