"""
ScriptReel Configuration Loader
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from schemas import PipelineSettings

# 기본 설정 디렉토리
CONFIG_DIR = Path(__file__).parent

# 환경변수 → 설정 키 (타입 변환 함수)
_ENV_OVERRIDES = {
    "SCRIPTREEL_PHOTO_COUNT": ("photo_count", int),
    "SCRIPTREEL_VIDEO_COUNT": ("video_count", int),
    "SCRIPTREEL_MAX_WORKERS": ("max_workers", int),
    "SCRIPTREEL_OUTPUT_DIR": ("output_dir", str),
    "SCRIPTREEL_ERROR_LOG": ("error_log_path", str),
}


def get_default_pipeline_config() -> Dict[str, Any]:
    """기본 파이프라인 설정 반환"""
    return PipelineSettings().model_dump()


def load_pipeline_config(config_path: Optional[str] = None) -> PipelineSettings:
    """
    파이프라인 설정 로드

    Args:
        config_path: 설정 파일 경로 (기본: config/pipeline.yaml)

    Returns:
        PipelineSettings (파일 → 환경변수 순으로 덮어씀)
    """
    if config_path is None:
        config_path = CONFIG_DIR / "pipeline.yaml"

    config = get_default_pipeline_config()

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        config.update(loaded.get("pipeline", {}))

    for env_key, (field, cast) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_key)
        if raw:
            config[field] = cast(raw)

    return PipelineSettings(**config)
