"""
PipelineState 저장/복원 (중단 후 재개용).
"""

import json
import os

from schemas import PipelineState
from utils.logger import get_logger

logger = get_logger("state_store")


def save_state(state: PipelineState, path: str) -> str:
    """
    PipelineState를 JSON으로 저장.

    Args:
        state: 저장할 상태 스냅샷
        path: 파일 경로

    Returns:
        저장된 파일 경로
    """
    state_dir = os.path.dirname(path)
    if state_dir:
        os.makedirs(state_dir, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(state.model_dump(mode="json"), f, ensure_ascii=False, indent=2)

    logger.debug(f"State saved: {path} (stage: {state.stage.value}, segment {state.current_segment_index})")
    return path


def load_state(path: str) -> PipelineState:
    """저장된 상태를 읽고 불변식을 다시 검사한다 (손상 시 PipelineInvariantError)."""
    with open(path, "r", encoding="utf-8") as f:
        state = PipelineState.model_validate(json.load(f))
    return state.check_invariants()
