"""
Unit tests for PipelineOrchestrator (segment state machine).

Tests cover:
1. Happy path per segment (characters → photos → videos → complete)
2. Skip keeps processed_segments aligned with segments
3. Disallowed events raise PreconditionNotMet
4. Corrupted state raises PipelineInvariantError
5. Roster merge + compilation
"""
import sys
import os
import json
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pipeline import PipelineOrchestrator
from schemas import PipelineSettings, PipelineStage, PipelineState, Segment, OptionSource
from utils.errors import PreconditionNotMet, MissingPrerequisite, NotFound, PipelineInvariantError
from fakes import FailingClient, ScriptedClient, characters_json


def _segments(n):
    return [Segment(id=f"segment-{i}", title=f"Segment {i}", content=f"Scene {i}.") for i in range(1, n + 1)]


@pytest.fixture
def settings(tmp_path):
    return PipelineSettings(
        output_dir=str(tmp_path / "outputs"),
        error_log_path=str(tmp_path / "generation_errors.log"),
        max_workers=2,
    )


@pytest.fixture
def offline(settings):
    """Orchestrator whose client always fails (everything falls back)."""
    return PipelineOrchestrator(FailingClient(), settings)


def _complete_current(pipeline, state):
    state = pipeline.generate_characters(state)
    state = pipeline.generate_photos(state)
    state = pipeline.generate_videos(state)
    videos = state.segment_videos_by_segment_id[state.current_segment.id]
    state = pipeline.select_video(state, videos[0].id)
    return pipeline.complete_segment(state)


class TestStart:

    def test_pending_first_segment(self, offline):
        state = offline.start(_segments(2), "scifi")
        assert state.stage == PipelineStage.PENDING
        assert state.current_segment_index == 0
        assert state.photo_style == "realistic"

    def test_empty_script_is_finished(self, offline):
        state = offline.start([], "scifi")
        assert state.stage == PipelineStage.FINISHED


class TestSegmentFlow:

    def test_offline_segment(self, offline):
        state = offline.start(_segments(2), "scifi")

        state = offline.generate_characters(state)
        assert state.stage == PipelineStage.CHARACTERS_GENERATED
        assert [c.name for c in state.current_characters] == ["Captain Nova", "Engineer Zeta"]

        # fallback photos come preselected
        state = offline.generate_photos(state)
        assert state.stage == PipelineStage.PHOTOS_COMPLETE

        state = offline.generate_videos(state)
        assert state.stage == PipelineStage.VIDEOS_PENDING
        videos = state.segment_videos_by_segment_id["segment-1"]
        assert len(videos) == 3

        state = offline.select_video(state, videos[1].id)
        state = offline.complete_segment(state)
        assert state.stage == PipelineStage.PENDING
        assert state.current_segment_index == 1
        assert state.current_characters == []

        done = state.processed_segments[0]
        assert done.segment_id == "segment-1"
        assert done.selected_video_id == videos[1].id
        assert len(done.photos) == 2
        assert all(c.image_url for c in done.characters)

    def test_complete_refused_without_videos(self, offline):
        state = offline.generate_videos(offline.generate_photos(offline.generate_characters(
            offline.start(_segments(2), "scifi")
        )))
        state = state.evolve(segment_videos_by_segment_id={"segment-1": []})

        with pytest.raises(PreconditionNotMet) as exc:
            offline.complete_segment(state)
        assert exc.value.title == "Videos Required"
        assert state.stage == PipelineStage.VIDEOS_PENDING
        assert state.current_segment_index == 0
        assert state.processed_segments == []

    def test_ai_photos_need_selection(self, settings):
        pipeline = PipelineOrchestrator(ScriptedClient(text=characters_json("Mara", "Otto")), settings)
        state = pipeline.generate_characters(pipeline.start(_segments(1), "scifi"))
        state = pipeline.generate_photos(state)
        assert state.stage == PipelineStage.PHOTOS_PENDING

        mara, otto = state.current_characters
        assert all(
            o.source == OptionSource.AI
            for o in state.photo_options_by_character_id[mara.id]
        )
        with pytest.raises(PreconditionNotMet):
            pipeline.generate_videos(state)

        state = pipeline.select_photo(state, mara.id, f"{mara.id}-photo-1")
        assert state.stage == PipelineStage.PHOTOS_PENDING
        state = pipeline.select_photo(state, otto.id, f"{otto.id}-photo-0")
        assert state.stage == PipelineStage.PHOTOS_COMPLETE

        state = pipeline.generate_videos(state)
        assert state.segment_videos_by_segment_id["segment-1"][0].source == OptionSource.AI

    def test_complete_needs_selected_video(self, offline):
        state = offline.start(_segments(1), "scifi")
        state = offline.generate_videos(offline.generate_photos(offline.generate_characters(state)))
        with pytest.raises(PreconditionNotMet) as exc:
            offline.complete_segment(state)
        assert exc.value.title == "Video Selection Required"

    def test_videos_without_characters(self, settings):
        # a model that names nobody still yields one default character, so force an empty cast
        pipeline = PipelineOrchestrator(FailingClient(), settings)
        state = pipeline.generate_characters(pipeline.start(_segments(1), "x"))
        state = state.evolve(current_characters=[], stage=PipelineStage.PHOTOS_COMPLETE)
        with pytest.raises(MissingPrerequisite):
            pipeline.generate_videos(state)

    def test_preset_segment_photos(self, settings):
        pipeline = PipelineOrchestrator(FailingClient(), settings)
        segment = Segment(id="segment-1", title="Preset", photos=["https://img.example.com/given.png"])
        state = pipeline.generate_characters(pipeline.start([segment], "x"))
        state = state.evolve(current_characters=[], stage=PipelineStage.PHOTOS_COMPLETE)
        state = pipeline.generate_videos(state)
        videos = state.segment_videos_by_segment_id["segment-1"]
        assert videos[0].thumbnail_url == "https://img.example.com/given.png"

    def test_regenerate_characters(self, offline):
        state = offline.generate_characters(offline.start(_segments(1), "scifi"))
        again = offline.generate_characters(state)
        assert again.stage == PipelineStage.CHARACTERS_GENERATED
        assert [c.name for c in again.current_characters] == [c.name for c in state.current_characters]

    def test_unknown_video(self, offline):
        state = offline.start(_segments(1), "scifi")
        state = offline.generate_videos(offline.generate_photos(offline.generate_characters(state)))
        with pytest.raises(NotFound):
            offline.select_video(state, "nope")

    def test_input_state_unchanged(self, offline):
        start = offline.start(_segments(1), "scifi")
        offline.generate_characters(start)
        assert start.stage == PipelineStage.PENDING
        assert start.current_characters == []


class TestSkip:

    def test_skipped_middle_segment(self, offline):
        state = offline.start(_segments(3), "adventure")
        state = _complete_current(offline, state)
        state = offline.generate_characters(state)
        state = offline.skip_segment(state)
        state = _complete_current(offline, state)

        assert state.stage == PipelineStage.FINISHED
        processed = state.processed_segments
        assert len(processed) == 3
        assert [p.segment_id for p in processed] == ["segment-1", "segment-2", "segment-3"]
        assert processed[1].skipped is True
        assert processed[1].videos == []
        assert processed[1].selected_video_id is None
        assert not processed[0].skipped and processed[0].selected_video
        assert not processed[2].skipped and processed[2].selected_video

    def test_skip_from_pending_uses_fallback_characters(self, offline):
        state = offline.skip_segment(offline.start(_segments(2), "romance"))
        assert [c.name for c in state.processed_segments[0].characters] == ["Taylor", "Riley"]
        assert state.current_segment_index == 1

    def test_skip_from_videos_pending(self, offline):
        state = offline.start(_segments(1), "x")
        state = offline.generate_videos(offline.generate_photos(offline.generate_characters(state)))
        state = offline.skip_segment(state)
        assert state.stage == PipelineStage.FINISHED
        assert state.processed_segments[0].videos == []


class TestDisallowedEvents:

    def test_complete_from_characters_generated(self, offline):
        state = offline.generate_characters(offline.start(_segments(1), "x"))
        with pytest.raises(PreconditionNotMet):
            offline.complete_segment(state)

    def test_videos_from_pending(self, offline):
        with pytest.raises(PreconditionNotMet):
            offline.generate_videos(offline.start(_segments(1), "x"))

    def test_photos_from_pending(self, offline):
        with pytest.raises(PreconditionNotMet):
            offline.generate_photos(offline.start(_segments(1), "x"))

    def test_finish_before_last_segment(self, offline):
        with pytest.raises(PreconditionNotMet):
            offline.finish(offline.start(_segments(1), "x"))

    def test_no_events_after_finish(self, offline):
        state = offline.start([], "x")
        with pytest.raises(PreconditionNotMet):
            offline.generate_characters(state)
        with pytest.raises(PreconditionNotMet):
            offline.skip_segment(state)


class TestInvariants:

    def test_index_without_processed_segment(self, offline):
        corrupt = PipelineState(segments=_segments(2), theme="x", current_segment_index=1)
        with pytest.raises(PipelineInvariantError):
            offline.generate_characters(corrupt)

    def test_finished_stage_mismatch(self, offline):
        corrupt = PipelineState(segments=_segments(2), theme="x", stage=PipelineStage.FINISHED)
        with pytest.raises(PipelineInvariantError):
            offline.finish(corrupt)


class TestFinishAndCompile:

    def test_roster_merged_by_name(self, offline):
        state = offline.start(_segments(3), "scifi")
        while not state.is_finished:
            state = _complete_current(offline, state)
        state = offline.finish(state)

        assert [c.name for c in state.roster_characters] == ["Captain Nova", "Engineer Zeta"]
        first = state.processed_segments[0].characters
        assert state.roster_characters[0].id == first[0].id
        assert state.roster_characters[0].image_url == first[0].image_url

    def test_compile_writes_manifest(self, offline, settings):
        state = offline.start(_segments(2), "scifi")
        state = _complete_current(offline, state)
        state = offline.skip_segment(state)
        result = offline.compile(offline.finish(state))

        assert result.manifest_path.startswith(settings.output_dir)
        assert os.path.exists(result.manifest_path)
        assert [clip.segment_id for clip in result.clips] == ["segment-1", "segment-2"]
        assert result.clips[0].video_url is not None
        assert result.clips[1].video_url is None
        assert result.skipped_segment_ids == ["segment-2"]

        with open(result.manifest_path, "r", encoding="utf-8") as f:
            manifest = json.load(f)
        assert manifest["project_id"] == result.project_id
        assert len(manifest["roster"]) == 2

    def test_compile_before_finish(self, offline):
        with pytest.raises(PreconditionNotMet):
            offline.compile(offline.start(_segments(1), "x"))

    def test_run_end_to_end(self, settings):
        client = ScriptedClient(text=characters_json("Mara", "Otto"))
        result = PipelineOrchestrator(client, settings).run(_segments(2), "scifi", "anime")
        assert len(result.clips) == 2
        assert all(clip.video_url.startswith("https://cdn.example.com/video/") for clip in result.clips)
        assert [c.name for c in result.roster] == ["Mara", "Otto"]
        assert all(req["style"] == "anime" for req in client.media_requests if req["kind"] == "image")
