"""
Generation Client: 생성형 AI 호출 경계.

스테이지는 이 Protocol만 의존하며, 생성자 주입으로 전달받는다.
- generate_text(prompt) -> str
- generate_media(request) -> str (URL 또는 URL 목록 JSON)
실패 시 GenerationError를 던지거나 빈 문자열을 반환한다. 둘 다 fallback 대상.
"""

import json
import os
from typing import Any, Dict, Optional, Protocol

from utils.constants import MODEL_TEXT_DEFAULT, MODEL_IMAGE_DEFAULT
from utils.errors import TransientGenerationFailure
from utils.logger import get_logger

logger = get_logger("generation_client")


class GenerationError(TransientGenerationFailure):
    """Raised by a client when a single generation attempt fails."""

    def __init__(self, reason: str, stage: str = "GenerationClient"):
        super().__init__(stage, reason)


class GenerationClient(Protocol):
    def generate_text(self, prompt: str) -> str:
        ...

    def generate_media(self, request: Dict[str, Any]) -> str:
        ...


class OpenAIGenerationClient:
    """
    OpenAI-backed GenerationClient.

    Single attempt per call (max_retries=0); retry/fallback policy belongs to
    the stages, not the client.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: str = MODEL_TEXT_DEFAULT,
        image_model: str = MODEL_IMAGE_DEFAULT,
    ):
        """
        Initialize OpenAI generation client.

        Args:
            api_key: OpenAI API key (기본: OPENAI_API_KEY 환경변수)
            text_model: 텍스트 생성 모델
            image_model: 이미지 생성 모델
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.text_model = text_model
        self.image_model = image_model
        self._client = None

    @property
    def client(self):
        """Lazy initialization of the OpenAI SDK client."""
        if self._client is None:
            if not self.api_key:
                raise GenerationError("OPENAI_API_KEY is not set")
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    def generate_text(self, prompt: str) -> str:
        logger.debug(f"generate_text (model: {self.text_model}, {len(prompt)} chars)")
        try:
            response = self.client.chat.completions.create(
                model=self.text_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.8,
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e

        content = response.choices[0].message.content or ""
        return content.strip()

    def generate_media(self, request: Dict[str, Any]) -> str:
        """
        Image requests go to the images endpoint; the provider has no video
        endpoint here, so video requests fail and the stage falls back.
        """
        kind = request.get("kind", "image")
        if kind != "image":
            raise GenerationError(f"media kind '{kind}' is not supported by OpenAIGenerationClient")

        count = int(request.get("count", 1))
        logger.debug(f"generate_media (model: {self.image_model}, count: {count})")

        urls = []
        try:
            # dall-e-3 는 요청당 1장만 지원
            for _ in range(count):
                response = self.client.images.generate(
                    model=self.image_model,
                    prompt=request.get("prompt", ""),
                    n=1,
                    size="1024x1024",
                )
                urls.extend(item.url for item in response.data if item.url)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e

        return json.dumps(urls)
