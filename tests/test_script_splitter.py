"""
Unit tests for script splitting and placeholder content.
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from schemas import Segment
from utils.script_splitter import split_script, sample_content_for_title, fill_empty_segments


class TestSplitScript:

    def test_blank_line_paragraphs(self):
        segments = split_script("First part.\nStill first.\n\n\nSecond part.\n   \nThird part.")
        assert [s.content for s in segments] == ["First part.\nStill first.", "Second part.", "Third part."]
        assert [s.id for s in segments] == ["segment-1", "segment-2", "segment-3"]
        assert [s.title for s in segments] == ["Segment 1", "Segment 2", "Segment 3"]

    def test_short_single_paragraph_groups_of_three(self):
        segments = split_script("\n".join(f"line {i}" for i in range(7)))
        assert [s.content.count("\n") + 1 for s in segments] == [3, 3, 1]

    def test_long_single_paragraph_groups_of_four(self):
        segments = split_script("\n".join(f"line {i}" for i in range(13)))
        assert [s.content.count("\n") + 1 for s in segments] == [4, 4, 4, 1]

    def test_single_line(self):
        assert [s.content for s in split_script("  Just one line.  ")] == ["Just one line."]

    def test_empty(self):
        assert split_script("") == []
        assert split_script("\n \n") == []


class TestSampleContent:

    def test_templates(self):
        assert sample_content_for_title("Introduction", 0).startswith("This introduction")
        assert sample_content_for_title("Conclusion", 4).startswith("This conclusion")
        assert "second key point" in sample_content_for_title("Main Point", 1)
        assert "next key point" in sample_content_for_title("Key Point", 7)
        assert "case study" in sample_content_for_title("Case Study: Mars", 2)
        assert "background information" in sample_content_for_title("Some Context", 1)

    def test_generic(self):
        text = sample_content_for_title("Rocket Fuel", 3)
        assert text.startswith("This segment covers Rocket Fuel in detail")

    def test_fill_empty_segments(self):
        segments = [Segment(id="a", title="Intro"), Segment(id="b", title="Body", content="Real text.")]
        filled = fill_empty_segments(segments)
        assert filled[0].content.startswith("This introduction")
        assert filled[1] is segments[1]
        assert segments[0].content == ""
