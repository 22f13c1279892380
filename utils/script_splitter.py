"""
스크립트 → Segment 목록 분할.

빈 줄 기준 단락 분할, 단락이 1개뿐이면 줄 단위로 3~4줄씩 그룹핑.
"""

import re
from typing import List

from schemas import Segment


_ORDINALS = ["first", "second", "third"]


def sample_content_for_title(title: str, index: int) -> str:
    """내용이 빈 세그먼트용 결정적 placeholder 텍스트."""
    title_lower = title.lower()
    if "introduction" in title_lower or "intro" in title_lower:
        return (
            "This introduction sets up the main topic and gives a brief overview of what will be "
            "covered in this video. It engages the audience with an interesting hook and establishes "
            "the tone for the rest of the content."
        )
    if "conclusion" in title_lower:
        return (
            "This conclusion summarizes the key points discussed in the video and provides a call to "
            "action for the audience. It leaves viewers with final thoughts and encourages engagement."
        )
    if "main point" in title_lower or "key point" in title_lower:
        ordinal = _ORDINALS[index] if index < len(_ORDINALS) else "next"
        return (
            f"This segment explores the {ordinal} key point in detail, providing examples and evidence "
            "to support the argument. It builds upon previous segments and leads naturally to the next topic."
        )
    if "example" in title_lower or "case study" in title_lower:
        return (
            "This segment presents a detailed example or case study that illustrates the main concepts. "
            "It provides concrete evidence and helps the audience understand the practical applications "
            "of the ideas being discussed."
        )
    if "background" in title_lower or "context" in title_lower:
        return (
            "This segment provides necessary background information and context for the topic. It helps "
            "viewers understand why this subject matters and how it fits into the broader picture."
        )
    return (
        f"This segment covers {title} in detail, explaining the core concepts and their significance. "
        "It presents information in a clear, engaging manner that helps viewers understand and retain the material."
    )


def split_script(script_text: str) -> List[Segment]:
    """
    사용자 스크립트를 세그먼트로 분할.

    Args:
        script_text: 전체 스크립트 (빈 줄로 세그먼트 구분)

    Returns:
        Segment 목록 (id: segment-<n>, title: Segment <n>)
    """
    text = (script_text or "").strip()
    if not text:
        return []

    paragraphs = [p.strip() for p in re.split(r'\n\s*\n', text) if p.strip()]

    # 빈 줄이 없어 1개 단락만 나오면 → 줄 단위로 분할 후 3~4줄씩 그룹핑
    if len(paragraphs) <= 1:
        lines = [line.strip() for line in text.split('\n') if line.strip()]
        if len(lines) > 1:
            group_size = 3 if len(lines) <= 12 else 4
            paragraphs = [
                "\n".join(lines[i:i + group_size])
                for i in range(0, len(lines), group_size)
            ]

    return [
        Segment(id=f"segment-{n}", title=f"Segment {n}", content=paragraph)
        for n, paragraph in enumerate(paragraphs, 1)
    ]


def fill_empty_segments(segments: List[Segment]) -> List[Segment]:
    """content가 빈 세그먼트에 placeholder 내용을 채운 새 목록."""
    return [
        segment if segment.content.strip()
        else segment.model_copy(update={"content": sample_content_for_title(segment.title, index)})
        for index, segment in enumerate(segments)
    ]
