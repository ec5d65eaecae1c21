"""Tests for viXra paper structure and export."""

from datetime import datetime, timezone

import pytest

from modules.vixra.models import PaperModel, SectionResponse
from modules.vixra.paper import (
    DEFAULT_AUTHORS,
    DEFAULT_CATEGORY,
    SECTION_ORDER,
    count_words,
    export_vixra_paper,
    extract_title_from_content,
    get_next_eligible_section,
    is_section_locked,
    resolve_paper_title,
    sanitize_title_candidate,
    vixra_export_filename,
)

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

MODEL_ONE = PaperModel(id="model-1", name="Model One", provider="OpenAI")
MODEL_TWO = PaperModel(id="model-2", name="Model Two", provider="Anthropic")


def responses(**sections: dict[str, str]) -> dict:
    return {
        section_id.replace("_", "-"): {model_id: SectionResponse(content=text) for model_id, text in by_model.items()}
        for section_id, by_model in sections.items()
    }


class TestSectionScheduling:
    def test_order(self):
        assert [s.id for s in SECTION_ORDER] == [
            "abstract",
            "introduction",
            "methodology",
            "results",
            "discussion",
            "conclusion",
            "citations",
            "acknowledgments",
            "peer-review",
        ]

    @pytest.mark.parametrize(
        "completed,expected",
        [
            ([], "abstract"),
            (["abstract"], "introduction"),
            (["abstract", "introduction", "methodology"], "results"),
            (["abstract", "introduction", "methodology", "results"], "discussion"),
            (
                ["abstract", "introduction", "methodology", "results", "discussion", "conclusion",
                 "citations", "acknowledgments"],
                "peer-review",
            ),
        ],
    )
    def test_next_eligible(self, completed, expected):
        assert get_next_eligible_section(completed) == expected

    def test_all_done(self):
        assert get_next_eligible_section([s.id for s in SECTION_ORDER]) is None

    def test_locked(self):
        assert is_section_locked("results", ["abstract"])
        assert not is_section_locked("results", ["abstract", "methodology"])
        assert is_section_locked("not-a-section", [])

    def test_peer_review_needs_conclusion(self):
        assert is_section_locked("peer-review", ["abstract", "introduction"])

    def test_count_words(self):
        assert count_words("") == 0
        assert count_words("  three  little\nwords ") == 3


class TestTitles:
    def test_sanitize(self):
        assert sanitize_title_candidate('**"Quantum `Cats`"**') == "Quantum Cats"
        assert sanitize_title_candidate("") == ""

    def test_heading_wins(self):
        assert extract_title_from_content("Intro text\n# The Real Title\nBody") == "The Real Title"

    def test_bold_title_line(self):
        assert extract_title_from_content("**Title**: Spooky Action at a Distance") == "Spooky Action at a Distance"

    def test_plain_title_line(self):
        assert extract_title_from_content("Some words\nTitle - Entangled Breakfasts") == "Entangled Breakfasts"

    def test_first_long_line(self):
        assert extract_title_from_content("- ok\n- Gravity is Optional\n") == "Gravity is Optional"

    def test_skips_preamble(self):
        content = "Abstract\nKeywords: cats, boxes\nThe Theory of Everything Else"
        assert extract_title_from_content(content, skip_section_preamble=True) == "The Theory of Everything Else"
        assert extract_title_from_content(content) == "Abstract"

    def test_empty(self):
        assert extract_title_from_content("   ") == ""

    def test_variable_title_wins(self):
        sections = responses(abstract={"model-1": "# From Abstract"})
        assert resolve_paper_title({"Title": "  From Variable "}, sections) == "From Variable"

    def test_title_from_abstract(self):
        sections = responses(abstract={"model-1": "Abstract\nOn the Elasticity of Time"})
        assert resolve_paper_title({}, sections) == "On the Elasticity of Time"

    def test_title_from_later_section(self):
        """Without an abstract, preferred sections are searched in order."""
        sections = responses(
            citations={"model-1": "# Not This One"},
            results={"model-1": "# Results Say Yes"},
        )
        assert resolve_paper_title({}, sections) == "Results Say Yes"

    def test_no_title(self):
        assert resolve_paper_title({}, {}) == ""


class TestExport:
    def test_single_model_paper(self):
        variables = {
            "Title": "Quantum Cats",
            "Authors": "Dr. Who",
            "ScienceCategory": "Physics - Quantum Physics",
        }
        content = export_vixra_paper(
            variables, responses(abstract={"model-1": "We study cats."}), [MODEL_ONE], now=NOW
        )

        assert content == (
            "# Quantum Cats\n\n"
            "**Authors:** Dr. Who\n\n"
            "**Science Category:** Physics - Quantum Physics\n\n"
            "**Generated:** 2025-01-02 03:04:05 UTC\n\n"
            "---\n\n"
            "## Abstract\n\n"
            "We study cats.\n\n"
            "---\n\n"
            "## Generation Metadata\n\n"
            "**Generated using AI models:**\n"
            "- Model One (OpenAI)\n\n"
            "**Total sections generated:** 1\n\n"
            "**Paper variables:**\n"
            "- Title: Quantum Cats\n"
            "- Authors: Dr. Who\n"
            "- ScienceCategory: Physics - Quantum Physics\n\n"
            "\n*This satirical academic paper was generated using the Vixra Mode "
            "of the AI Model Comparison Tool.*\n"
        )

    def test_title_and_authors_without_institution(self):
        content = export_vixra_paper({"Title": "T", "Authors": "A"}, {}, [], now=NOW)
        assert content.startswith("# T\n")
        assert "**Authors:** A" in content
        assert "Institution" not in content

    def test_defaults_and_institution(self):
        content = export_vixra_paper({"Institution": "Cat Lab"}, {}, [], now=NOW)
        assert f"**Authors:** {DEFAULT_AUTHORS}" in content
        assert "**Institution:** Cat Lab" in content
        assert f"**Science Category:** {DEFAULT_CATEGORY}" in content
        assert "**Generated using AI models:**" not in content
        assert "**Total sections generated:** 0" in content

    def test_legacy_author_variable(self):
        content = export_vixra_paper({"ResearcherName": "Prof. Meow"}, {}, [], now=NOW)
        assert "**Authors:** Prof. Meow" in content

    def test_multiple_models_labelled(self):
        sections = responses(results={"model-1": "Yes.", "model-2": "No.", "model-3": "Maybe."})
        content = export_vixra_paper({"Title": "T"}, sections, [MODEL_ONE, MODEL_TWO], now=NOW)

        assert (
            "## Results\n\n"
            "**Model One (OpenAI) Response:**\n\nYes.\n\n"
            "\n---\n\n"
            "**Model Two (Anthropic) Response:**\n\nNo.\n\n"
            "\n---\n\n"
            "**model-3 Response:**\n\nMaybe.\n\n"
            "---\n\n"
        ) in content

    def test_sections_follow_paper_order(self):
        sections = responses(
            conclusion={"model-1": "End."},
            citations={"model-1": "[1] Cat et al."},
            abstract={"model-1": "Start."},
        )
        content = export_vixra_paper({"Title": "T"}, sections, [MODEL_ONE], now=NOW)

        assert content.index("## Abstract") < content.index("## Conclusion") < content.index("## References")
        assert "## Citations" not in content


class TestFilename:
    def test_from_title(self):
        assert vixra_export_filename({"Title": "Quantum Cats"}, today=NOW) == "quantum_cats_2025-01-02.md"

    def test_unsafe_characters(self):
        assert vixra_export_filename({"Title": "E=mc² & Cats"}, today=NOW) == "e_mc____cats_2025-01-02.md"

    def test_derived_title(self):
        sections = responses(abstract={"model-1": "# Time Is Soup"})
        assert vixra_export_filename({}, sections, today=NOW) == "time_is_soup_2025-01-02.md"

    def test_fallback(self):
        assert vixra_export_filename({}, today=NOW) == "vixra-paper_2025-01-02.md"
