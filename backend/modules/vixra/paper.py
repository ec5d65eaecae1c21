"""
viXra paper structure and markdown export.

Sections are generated in dependency order; the export stitches whatever
sections have responses into a single markdown document.
"""

import re
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from .models import PaperModel, PaperSection, SectionResponses

DEFAULT_CATEGORY = "General Science and Philosophy"
DEFAULT_AUTHORS = "Anonymous Research Collective"

SECTION_ORDER: tuple[PaperSection, ...] = (
    PaperSection(id="abstract", name="Abstract"),
    PaperSection(id="introduction", name="Introduction", dependencies=("abstract",)),
    PaperSection(id="methodology", name="Methodology", dependencies=("introduction",)),
    PaperSection(id="results", name="Results", dependencies=("abstract", "methodology")),
    PaperSection(id="discussion", name="Discussion", dependencies=("results",)),
    PaperSection(id="conclusion", name="Conclusion", dependencies=("discussion",)),
    PaperSection(id="citations", name="Citations", dependencies=("abstract", "results")),
    PaperSection(id="acknowledgments", name="Acknowledgments", dependencies=("conclusion",)),
    PaperSection(id="peer-review", name="Peer Review Response", dependencies=("conclusion",)),
)

# Export headings; citations print as References
SECTION_TITLES: dict[str, str] = {
    "abstract": "Abstract",
    "introduction": "Introduction",
    "methodology": "Methodology",
    "results": "Results",
    "discussion": "Discussion",
    "conclusion": "Conclusion",
    "citations": "References",
    "acknowledgments": "Acknowledgments",
    "peer-review": "Peer Review Response",
}

SCIENCE_CATEGORIES: tuple[str, ...] = (
    "Physics - High Energy Particle Physics",
    "Physics - Quantum Gravity and String Theory",
    "Physics - Relativity and Cosmology",
    "Physics - Astrophysics",
    "Physics - Quantum Physics",
    "Physics - Nuclear and Atomic Physics",
    "Physics - Condensed Matter",
    "Physics - Thermodynamics and Energy",
    "Physics - Classical Physics",
    "Physics - Geophysics",
    "Physics - Climate Research",
    "Physics - Mathematical Physics",
    "Physics - History and Philosophy of Physics",
    "Mathematics - Set Theory and Logic",
    "Mathematics - Number Theory",
    "Mathematics - Combinatorics and Graph Theory",
    "Mathematics - Algebra",
    "Mathematics - Geometry",
    "Mathematics - Topology",
    "Mathematics - Functions and Analysis",
    "Mathematics - Statistics",
    "Mathematics - General Mathematics",
    "Computational Science - DSP",
    "Computational Science - Data Structures and Algorithms",
    "Computational Science - Artificial Intelligence",
    "Biology - Biochemistry",
    "Biology - Physics of Biology",
    "Biology - Mind Science",
    "Biology - Quantitative Biology",
    "Chemistry",
    "Humanities - Archaeology",
    "Humanities - Linguistics",
    "Humanities - Economics and Finance",
    "Humanities - Social Science",
    "Humanities - Religion and Spiritualism",
    "General Science and Philosophy",
    "Education and Didactics",
)

_TITLE_PREFERRED = ("abstract", "introduction", "results", "discussion", "conclusion")

_HEADING = re.compile(r"^\s*#\s+(.+?)\s*$", re.MULTILINE)
_BOLD_TITLE = re.compile(r"\*\*Title\*\*\s*[:\-]\s*(.+)", re.IGNORECASE)
_COLON_TITLE = re.compile(r"(?:^|\n)\s*Title\s*[:\-]\s*(.+)", re.IGNORECASE)
_LIST_MARKER = re.compile(r"^[-*>\d.]+\s*")
_EDGE_QUOTES = re.compile("^[\"'“”‘’`]+|[\"'“”‘’`]+$")
_PREAMBLE = re.compile(r"^(abstract|science\s+category|keywords)\b", re.IGNORECASE)
_UNSAFE_FILENAME = re.compile(r"[^a-z0-9\-_]", re.IGNORECASE)


def _has_value(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(value.strip())


def sanitize_title_candidate(candidate: str) -> str:
    if not candidate:
        return ""
    cleaned = candidate.replace("**", "")
    cleaned = re.sub(r"[_`]", "", cleaned).strip()
    return _EDGE_QUOTES.sub("", cleaned).strip()


def extract_title_from_content(content: str, skip_section_preamble: bool = False) -> str:
    """
    Pull a plausible title out of generated text.

    Tries a markdown H1, then a ``**Title**:`` or ``Title:`` line, then the
    first line of at least five characters.
    """
    if not _has_value(content):
        return ""

    match = _HEADING.search(content)
    if match:
        heading = sanitize_title_candidate(match.group(1))
        if heading:
            return heading

    for pattern in (_BOLD_TITLE, _COLON_TITLE):
        match = pattern.search(content)
        if match:
            title = sanitize_title_candidate(match.group(1).splitlines()[0])
            if title:
                return title

    for raw_line in content.splitlines():
        line = _LIST_MARKER.sub("", raw_line.strip()).strip()
        if not line:
            continue
        if skip_section_preamble and _PREAMBLE.match(line):
            continue
        sanitized = sanitize_title_candidate(line)
        if len(sanitized) >= 5:
            return sanitized

    return ""


def get_primary_section_content(section_responses: SectionResponses, section_id: str) -> Optional[str]:
    """First non-empty response content for a section."""
    for response in (section_responses.get(section_id) or {}).values():
        if _has_value(response.content):
            return response.content.strip()
    return None


def _derive_title_from_sections(section_responses: SectionResponses) -> str:
    others = [s for s in SECTION_TITLES if s not in _TITLE_PREFERRED]

    for section_id in _TITLE_PREFERRED:
        content = get_primary_section_content(section_responses, section_id)
        if content:
            candidate = extract_title_from_content(content, section_id == "abstract")
            if candidate:
                return candidate

    for section_id in others:
        content = get_primary_section_content(section_responses, section_id)
        if content:
            candidate = extract_title_from_content(content)
            if candidate:
                return candidate

    aggregated = "\n".join(
        content
        for content in (
            get_primary_section_content(section_responses, section_id)
            for section_id in (*_TITLE_PREFERRED, *others)
        )
        if content
    )
    return extract_title_from_content(aggregated)


def resolve_paper_title(variables: Mapping[str, str], section_responses: SectionResponses) -> str:
    """The ``Title`` variable, else a title derived from the abstract or other sections."""
    if _has_value(variables.get("Title")):
        return variables["Title"].strip()

    abstract = get_primary_section_content(section_responses, "abstract")
    if abstract:
        title = extract_title_from_content(abstract, skip_section_preamble=True)
        if title:
            return title

    return _derive_title_from_sections(section_responses)


# ============================================================================
# Section scheduling
# ============================================================================


def is_section_locked(section_id: str, completed: Sequence[str]) -> bool:
    section = next((s for s in SECTION_ORDER if s.id == section_id), None)
    if section is None:
        return True
    return any(dep not in completed for dep in section.dependencies)


def get_next_eligible_section(completed: Sequence[str]) -> Optional[str]:
    """First incomplete section whose dependencies are all complete."""
    for section in SECTION_ORDER:
        if section.id in completed:
            continue
        if not is_section_locked(section.id, completed):
            return section.id
    return None


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


# ============================================================================
# Export
# ============================================================================


def export_vixra_paper(
    variables: Mapping[str, str],
    section_responses: SectionResponses,
    selected_models: Sequence[PaperModel],
    now: Optional[datetime] = None,
) -> str:
    """Assemble the generated paper as markdown."""
    now = now or datetime.now(timezone.utc)
    models_by_id = {model.id: model for model in selected_models}

    title = resolve_paper_title(variables, section_responses)
    authors = next(
        (variables[key] for key in ("Authors", "Author", "ResearcherName") if _has_value(variables.get(key))),
        DEFAULT_AUTHORS,
    )
    category = variables.get("ScienceCategory") or DEFAULT_CATEGORY

    parts: list[str] = []
    if title:
        parts.append(f"# {title}\n\n")
    parts.append(f"**Authors:** {authors}\n\n")
    if _has_value(variables.get("Institution")):
        parts.append(f"**Institution:** {variables['Institution']}\n\n")
    parts.append(f"**Science Category:** {category}\n\n")
    parts.append(f"**Generated:** {now:%Y-%m-%d %H:%M:%S %Z}".rstrip() + "\n\n")
    parts.append("---\n\n")

    for section_id, heading in SECTION_TITLES.items():
        responses = section_responses.get(section_id) or {}
        if not responses:
            continue

        parts.append(f"## {heading}\n\n")
        if len(responses) == 1:
            response = next(iter(responses.values()))
            if response.content:
                parts.append(f"{response.content}\n\n")
        else:
            for index, (model_id, response) in enumerate(responses.items()):
                model = models_by_id.get(model_id)
                label = f"{model.name} ({model.provider})" if model else model_id
                if index > 0:
                    parts.append("\n---\n\n")
                parts.append(f"**{label} Response:**\n\n")
                if response.content:
                    parts.append(f"{response.content}\n\n")
        parts.append("---\n\n")

    parts.append("## Generation Metadata\n\n")
    if selected_models:
        parts.append("**Generated using AI models:**\n")
        parts.extend(f"- {model.name} ({model.provider})\n" for model in selected_models)
        parts.append("\n")

    generated = sum(1 for responses in section_responses.values() if responses)
    parts.append(f"**Total sections generated:** {generated}\n\n")

    provided = [(key, value) for key, value in variables.items() if _has_value(value)]
    if provided:
        parts.append("**Paper variables:**\n")
        parts.extend(f"- {key}: {value}\n" for key, value in provided)
        parts.append("\n")

    parts.append(
        "\n*This satirical academic paper was generated using the Vixra Mode "
        "of the AI Model Comparison Tool.*\n"
    )
    return "".join(parts)


def vixra_export_filename(
    variables: Mapping[str, str],
    section_responses: Optional[SectionResponses] = None,
    today: Optional[datetime] = None,
) -> str:
    """``{safe_title}_{YYYY-MM-DD}.md``, falling back to ``vixra-paper``."""
    today = today or datetime.now(timezone.utc)
    title = resolve_paper_title(variables, section_responses or {}) or "vixra-paper"
    safe_title = _UNSAFE_FILENAME.sub("_", title).lower()
    return f"{safe_title}_{today:%Y-%m-%d}.md"
