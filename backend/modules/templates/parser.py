"""
Markdown template parser.

A template file is a markdown document:

    ---
    mode: battle
    version: "2"
    description: Challenger prompts
    ---
    # Battle Prompts

    ## Generic Test Questions

    ### Challenger
    #### System Instructions
    You are reviewing {response}.
    #### User Template
    Original prompt: {originalPrompt}

The YAML front matter is optional. ``##`` headers open categories and
``###`` headers open templates; everything until the next header is the
template body. ``####`` headers inside a body split it into structured
sections. Lines inside fenced code blocks are always body text.
"""

import re
from typing import Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import TemplateParseError
from .models import (
    FrontMatter,
    ParsedCategory,
    ParsedTemplate,
    TemplateDocument,
    TemplateSections,
)


FRONT_MATTER_DELIMITER = "---"
FENCE_PATTERN = re.compile(r"^(```|~~~)")
SKIPPED_CATEGORY_PATTERN = re.compile(r"^(Author|Date)\b")

SECTION_HEADERS = {
    "System Instructions": "system_instructions",
    "User Context Template": "user_template",
    "User Template": "user_template",
    "Context Template": "context_template",
    "Response Guidelines": "response_guidelines",
}


def slugify(name: str) -> str:
    """Lowercase a header and collapse non-alphanumeric runs to ``-``."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class _FenceTracker:
    """Tracks whether the current line sits inside a fenced code block."""

    def __init__(self):
        self.marker: Optional[str] = None

    def feed(self, line: str) -> bool:
        """Consume a line; return True if it is code (or a fence line)."""
        match = FENCE_PATTERN.match(line.strip())
        if self.marker is None:
            if match:
                self.marker = match.group(1)
                return True
            return False
        if match and match.group(1) == self.marker:
            self.marker = None
        return True


def split_front_matter(text: str, source: Optional[str] = None) -> tuple[FrontMatter, list[str], int]:
    """
    Separate YAML front matter from the markdown body.

    Returns:
        (front matter, body lines, line number of the first body line)

    Raises:
        TemplateParseError: Unclosed or malformed front matter
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return FrontMatter(), lines, 1

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        raise TemplateParseError("Unclosed front matter", source, 1)

    raw = "\n".join(lines[1:index])
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise TemplateParseError(f"Invalid front matter: {e}", source, 1) from e
    if not isinstance(data, dict):
        raise TemplateParseError("Front matter must be a mapping", source, 1)

    if data.get("version") is not None:
        data["version"] = str(data["version"])
    try:
        front_matter = FrontMatter.model_validate(data)
    except PydanticValidationError as e:
        raise TemplateParseError(f"Invalid front matter: {e}", source, 1) from e

    return front_matter, lines[index + 1:], index + 2


def parse_sections(content: str) -> TemplateSections:
    """
    Split a template body on its ``####`` section headers.

    Text before the first section header is dropped when headers exist.
    A body without any section header is entirely the user template.
    """
    sections: dict[str, list[str]] = {}
    current: Optional[str] = None
    fence = _FenceTracker()

    for line in content.splitlines():
        if not fence.feed(line) and line.startswith("#### "):
            title = line[5:].strip()
            field = next(
                (f for header, f in SECTION_HEADERS.items() if title.startswith(header)),
                None,
            )
            if field is not None:
                current = field
                sections.setdefault(current, [])
                continue
        if current is not None:
            sections[current].append(line)

    if not sections:
        return TemplateSections(user_template=content)

    parts = {field: "\n".join(lines).strip() for field, lines in sections.items()}
    return TemplateSections(
        system_instructions=parts.get("system_instructions") or None,
        user_template=parts.get("user_template", ""),
        context_template=parts.get("context_template") or None,
        response_guidelines=parts.get("response_guidelines") or None,
    )


def parse_template_document(text: str, source: Optional[str] = None) -> TemplateDocument:
    """
    Parse one markdown template file.

    Args:
        text: File contents
        source: File name used in error messages

    Raises:
        TemplateParseError: Malformed front matter, a template header before
            any category, or a duplicate template name within a category
    """
    front_matter, lines, first_line = split_front_matter(text, source)

    title: Optional[str] = None
    categories: list[ParsedCategory] = []
    category: Optional[ParsedCategory] = None
    template_name: Optional[str] = None
    template_line = 0
    body: list[str] = []
    fence = _FenceTracker()

    def close_template() -> None:
        nonlocal template_name
        if template_name is None or category is None:
            return
        content = "\n".join(body).strip()
        template_id = slugify(template_name)
        if any(t.id == template_id for t in category.templates):
            raise TemplateParseError(
                f"Duplicate template '{template_name}' in category '{category.name}'",
                source,
                template_line,
            )
        category.templates.append(ParsedTemplate(
            id=template_id,
            name=template_name,
            content=content,
            sections=parse_sections(content),
            line=template_line,
        ))
        template_name = None
        body.clear()

    for offset, line in enumerate(lines):
        line_number = first_line + offset

        if fence.feed(line):
            if template_name is not None:
                body.append(line)
            continue

        if line.startswith("### ") and not line.startswith("#### "):
            close_template()
            if category is None:
                raise TemplateParseError(
                    "Template header appears before any category", source, line_number
                )
            template_name = line[4:].strip()
            template_line = line_number
            continue

        if line.startswith("## "):
            name = line[3:].strip()
            if SKIPPED_CATEGORY_PATTERN.match(name):
                continue
            close_template()
            category = ParsedCategory(id=slugify(name), name=name)
            categories.append(category)
            continue

        if line.startswith("# ") and category is None:
            title = line[2:].strip()
            continue

        if template_name is not None:
            body.append(line.rstrip())

    close_template()

    return TemplateDocument(title=title, front_matter=front_matter, categories=categories)
