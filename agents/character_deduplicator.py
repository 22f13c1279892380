"""
Character Deduplicator: 세그먼트별 캐릭터 목록을 하나의 roster로 병합.

중복 키는 name (대소문자 구분, 완전 일치). 먼저 등장한 캐릭터가 남고
뒤에 오는 동명 캐릭터는 필드 병합 없이 통째로 버려진다.
"""

from typing import Iterable, List

from schemas import Character, ProcessedSegment


class CharacterDeduplicator:

    @staticmethod
    def merge(existing_roster: Iterable[Character], new_characters: Iterable[Character]) -> List[Character]:
        """
        existing_roster 순서 유지 + new_characters 중 새 이름만 입력 순서대로 추가.

        Idempotent: merge(merge(R, C), C) == merge(R, C)
        """
        merged = list(existing_roster)
        seen = {character.name for character in merged}
        for character in new_characters:
            if character.name in seen:
                continue
            seen.add(character.name)
            merged.append(character)
        return merged

    @classmethod
    def merge_segments(cls, processed_segments: Iterable[ProcessedSegment]) -> List[Character]:
        """모든 ProcessedSegment의 캐릭터를 세그먼트 순서대로 병합."""
        roster: List[Character] = []
        for segment in processed_segments:
            roster = cls.merge(roster, segment.characters)
        return roster
