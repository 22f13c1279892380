"""
ScriptReel CLI - Command-line interface for script-to-short-video generation.

기능:
- 스크립트 파일/직접 입력 → 세그먼트 분할
- 세그먼트별 캐릭터 / 사진 / 영상 선택 (또는 skip)
- 세그먼트마다 상태 저장, 중단 후 재개
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.append(str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from config import load_pipeline_config
from schemas import PipelineStage, PipelineState
from agents.generation_client import OpenAIGenerationClient
from pipeline import PipelineOrchestrator
from utils.errors import NotFound, PreconditionNotMet
from utils.script_splitter import split_script, fill_empty_segments
from utils.state_store import save_state, load_state


def print_banner():
    """Print ScriptReel banner."""
    banner = """
=====================================================================
                         S C R I P T R E E L

              Script-to-Short-Video Generator
              Characters -> Photos -> Videos
=====================================================================
"""
    print(banner)


def load_env():
    """Load environment variables from .env file."""
    load_dotenv()
    print("[OK] Environment variables loaded")


def read_script() -> str:
    """
    Get script text from a file path or typed lines.

    Returns:
        Script text (empty string if nothing was entered)
    """
    print("\nStep 1/3: Script")
    path = input("Enter script file path (or press Enter to type it): ").strip()
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    print("Type your script. Separate segments with a blank line. Finish with a line containing only 'END'.")
    lines = []
    while True:
        line = input()
        if line.strip() == "END":
            break
        lines.append(line)
    return "\n".join(lines)


def choose(prompt: str, options, default: int = 1) -> int:
    """1-based 번호 입력 → 0-based index. 잘못된 입력은 default."""
    raw = input(f"{prompt} (default: {default}): ").strip()
    try:
        index = int(raw) if raw else default
    except ValueError:
        print(f"[WARNING] Invalid choice. Using {default}.")
        index = default
    if not 1 <= index <= len(options):
        print(f"[WARNING] Choice out of range. Using {default}.")
        index = default
    return index - 1


def print_characters(state: PipelineState):
    print(f"\nCharacters for {state.current_segment.title}:")
    for i, character in enumerate(state.current_characters, 1):
        traits = ", ".join(character.traits)
        print(f"  {i}. {character.name} [{character.role}] - {character.description}")
        if traits:
            print(f"     traits: {traits}")


def pick_photos(pipeline: PipelineOrchestrator, state: PipelineState) -> PipelineState:
    for character in state.current_characters:
        options = state.photo_options_by_character_id.get(character.id) or []
        if not options:
            continue
        print(f"\nPhotos for {character.name}:")
        for i, option in enumerate(options, 1):
            marker = "*" if option.selected else " "
            print(f"  {marker} {i}. {option.url} ({option.source.value})")
        index = choose("  Choose a photo", options)
        state = pipeline.select_photo(state, character.id, options[index].id)
    return state


def pick_video(pipeline: PipelineOrchestrator, state: PipelineState) -> PipelineState:
    options = state.segment_videos_by_segment_id[state.current_segment.id]
    print("\nVideo options:")
    for i, option in enumerate(options, 1):
        print(f"  {i}. {option.url}")
        print(f"     thumbnail: {option.thumbnail_url} ({option.source.value})")
    index = choose("Choose a video", options)
    return pipeline.select_video(state, options[index].id)


def process_segment(pipeline: PipelineOrchestrator, state: PipelineState) -> PipelineState:
    """현재 세그먼트 1개를 대화형으로 처리."""
    segment = state.current_segment
    print("\n" + "=" * 60)
    print(f"Segment {state.current_segment_index + 1}/{state.total_segments}: {segment.title}")
    print("=" * 60)
    print(segment.content)

    if input("\nSkip this segment? (y/N): ").strip().lower() == "y":
        return pipeline.skip_segment(state)

    state = pipeline.generate_characters(state)
    print_characters(state)
    while input("Regenerate characters? (y/N): ").strip().lower() == "y":
        state = pipeline.generate_characters(state)
        print_characters(state)

    if input("\nCreate photos and videos for this segment? (Y/n): ").strip().lower() == "n":
        return pipeline.skip_segment(state)

    state = pipeline.generate_photos(state)
    state = pick_photos(pipeline, state)

    try:
        state = pipeline.generate_videos(state)
    except PreconditionNotMet as e:
        print(f"[{e.title}] {e.message}")
        return pipeline.skip_segment(state)

    state = pick_video(pipeline, state)
    return pipeline.complete_segment(state)


def main():
    """Main CLI entry point."""
    print_banner()
    load_env()

    if not os.getenv("OPENAI_API_KEY"):
        print("\n[WARNING] OPENAI_API_KEY not found in environment.")
        print("          Characters, photos and videos will use fallback placeholders.")
        print("          Set your API key in .env file or environment variables.\n")

    settings = load_pipeline_config()
    client = OpenAIGenerationClient(text_model=settings.text_model, image_model=settings.image_model)
    pipeline = PipelineOrchestrator(client, settings)
    state_path = os.path.join(settings.output_dir, "pipeline_state.json")

    state = None
    if os.path.exists(state_path):
        if input(f"Resume saved session ({state_path})? (Y/n): ").strip().lower() != "n":
            state = load_state(state_path)
            print(f"[OK] Resumed at segment {state.current_segment_index + 1}/{state.total_segments}")

    if state is None:
        segments = fill_empty_segments(split_script(read_script()))
        if not segments:
            print("[CANCELLED] The script is empty.")
            return
        print(f"[OK] Split into {len(segments)} segments")

        print("\nStep 2/3: Theme")
        print("Examples: adventure, scifi, romance, mystery")
        theme = input("Enter theme (default: adventure): ").strip() or "adventure"

        print("\nStep 3/3: Photo Style")
        print("Options: realistic, anime, comic, cyberpunk, fantasy, noir")
        style = input(f"Enter style (default: {settings.photo_style}): ").strip() or settings.photo_style

        state = pipeline.start(segments, theme, style)

    try:
        while state.stage != PipelineStage.FINISHED:
            try:
                state = process_segment(pipeline, state)
            except (PreconditionNotMet, NotFound) as e:
                print(f"[WARNING] {e}")
                continue
            save_state(state, state_path)

        state = pipeline.finish(state)
        result = pipeline.compile(state)

        print("\n" + "=" * 60)
        print("ALL DONE! Your clips are ready.")
        print("=" * 60)
        print(f"Project ID: {result.project_id}")
        print(f"Manifest: {result.manifest_path}")
        print(f"Segments: {len(result.clips)} (skipped: {len(result.skipped_segment_ids)})")
        print(f"Characters: {', '.join(c.name for c in result.roster)}")
        if os.path.exists(state_path):
            os.remove(state_path)
        print("\nThanks for using ScriptReel!\n")

    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Progress saved. Run again to resume.")
        save_state(state, state_path)
        sys.exit(1)


def quick_run(script_text: str, theme: str = "adventure", **kwargs):
    """
    Quick run function for programmatic use.

    Args:
        script_text: Full script
        theme: Video theme
        **kwargs: Additional parameters (photo_style, config_path)

    Returns:
        CompilationResult object
    """
    from pipeline import run_pipeline

    load_env()
    return run_pipeline(
        script_text,
        theme,
        photo_style=kwargs.get("photo_style"),
        config_path=kwargs.get("config_path"),
    )


if __name__ == "__main__":
    main()
