"""
Template compilation and caching.

Compiles every markdown template under the templates directory once at
startup, validates that each renders, and serves them by id, mode and
category afterwards.

Validation failures are logged and the template is still served. With
``strict=True`` the first failure raises TemplateError instead, which
aborts application startup.
"""

import hashlib
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from shared.exceptions import TemplateError

from .exceptions import TemplateNotFoundError
from .models import (
    CompiledCategory,
    CompiledTemplate,
    RenderResult,
    TemplateMetadata,
)
from .parser import parse_template_document
from .variable_engine import VariableEngine, extract_variables
from .variable_registry import VARIABLE_REGISTRIES, detect_mode, get_all_variable_aliases

logger = logging.getLogger(__name__)


# A brace that opens a placeholder name but never closes on its line
UNTERMINATED_PATTERN = re.compile(r"(?<!\\)\{[A-Za-z_][\w.-]*(?:\|[^{}\n]*)?$", re.MULTILINE)


def template_version(modified: datetime, content: str) -> str:
    """``yyyymmdd`` of the file mtime, a dot, and a short content hash."""
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()[:8]
    return f"{modified:%Y%m%d}.{digest}"


class TemplateCompiler:
    """
    In-memory cache of compiled prompt templates.

    Template ids are ``{category_id}:{template_id}``. Categories are indexed
    per mode, so two files may share a ``##`` header as long as their modes
    differ. Template ids are only unique within a mode: ``get_template``
    returns the last one compiled, ``get_template_by_path`` with a mode is
    exact.
    """

    def __init__(
        self,
        templates_path: str | Path,
        engine: Optional[VariableEngine] = None,
        strict: bool = False,
        validate: bool = True,
    ):
        self.templates_path = Path(templates_path)
        self.engine = engine or VariableEngine(policy="warn", aliases=get_all_variable_aliases())
        self.strict = strict
        self.validate = validate
        self._templates: dict[str, CompiledTemplate] = {}
        # mode (or None) -> category id -> category
        self._modes: dict[Optional[str], dict[str, CompiledCategory]] = {}
        self._compiled = False

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    @property
    def template_count(self) -> int:
        return len(self._templates)

    def compile_all(self) -> list[str]:
        """
        Compile every ``*.md`` file in the templates directory.

        Returns:
            Validation warnings, one per failing template

        Raises:
            TemplateError: In strict mode, on a missing directory, an
                unparseable file or a template that fails validation
        """
        self._templates.clear()
        self._modes.clear()
        warnings: list[str] = []

        if not self.templates_path.is_dir():
            message = f"Templates directory not found: {self.templates_path}"
            if self.strict:
                raise TemplateError(message, details={"path": str(self.templates_path)})
            logger.warning(message)
            self._compiled = True
            return [message]

        files = sorted(self.templates_path.glob("*.md"))
        for path in files:
            warnings.extend(self._compile_file(path))

        self._compiled = True
        logger.info(
            "Compiled %d templates from %d files (%d warnings)",
            len(self._templates),
            len(files),
            len(warnings),
        )
        return warnings

    def _compile_file(self, path: Path) -> list[str]:
        text = path.read_text(encoding="utf-8")
        try:
            document = parse_template_document(text, source=path.name)
        except TemplateError as e:
            if self.strict:
                raise
            logger.warning("Skipping template file %s: %s", path.name, e.message)
            return [e.message]

        mode = document.front_matter.mode or detect_mode(path.stem)
        if mode is not None and mode not in VARIABLE_REGISTRIES:
            message = f"Unknown mode '{mode}' in {path.name}"
            if self.strict:
                raise TemplateError(message, details={"file": path.name})
            logger.warning(message)
            mode = None

        modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        description = document.front_matter.description or f"Generated from {path.name}"
        warnings: list[str] = []

        for parsed_category in document.categories:
            category = CompiledCategory(
                id=parsed_category.id,
                name=parsed_category.name,
                mode=mode,
                file_path=str(path),
            )
            for parsed in parsed_category.templates:
                template = CompiledTemplate(
                    id=f"{parsed_category.id}:{parsed.id}",
                    name=parsed.name,
                    mode=mode,
                    category=parsed_category.name,
                    category_id=parsed_category.id,
                    content=parsed.content,
                    variables=extract_variables(parsed.content),
                    sections=parsed.sections,
                    metadata=TemplateMetadata(
                        file_path=str(path),
                        last_modified=modified,
                        version=document.front_matter.version
                        or template_version(modified, parsed.content),
                        description=description,
                    ),
                )

                if self.validate:
                    problem = self.validate_template(template)
                    if problem:
                        if self.strict:
                            raise TemplateError(
                                f"Template validation failed for {template.id}: {problem}",
                                details={"template_id": template.id, "file": path.name},
                            )
                        logger.warning("Template validation warning for %s: %s", template.id, problem)
                        warnings.append(f"{template.id}: {problem}")

                previous = self._templates.get(template.id)
                if previous is not None and previous.metadata.file_path != str(path):
                    logger.warning(
                        "Template %s (%s) redefined in %s (%s)",
                        template.id,
                        previous.mode,
                        path.name,
                        mode,
                    )
                self._templates[template.id] = template
                category.templates.append(template)

            categories = self._modes.setdefault(mode, {})
            previous_category = categories.get(category.id)
            if previous_category is not None:
                logger.warning(
                    "Category %s of mode %s redefined in %s (was %s)",
                    category.id,
                    mode,
                    path.name,
                    Path(previous_category.file_path).name,
                )
            categories[category.id] = category

        return warnings

    def validate_template(self, template: CompiledTemplate) -> Optional[str]:
        """
        Render a template with ``test_{name}`` values.

        Returns:
            A description of the first problem, or None if it renders cleanly
        """
        test_variables = {name: f"test_{name}" for name in template.variables}
        try:
            result = self.engine.render(template.content, test_variables, policy="error")
        except TemplateError as e:
            return e.message

        if UNTERMINATED_PATTERN.search(result.resolved):
            return "Unterminated placeholder"
        return None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_template(self, template_id: str) -> Optional[CompiledTemplate]:
        return self._templates.get(template_id)

    def get_template_by_path(
        self,
        category_id: str,
        template_id: str,
        mode: Optional[str] = None,
    ) -> Optional[CompiledTemplate]:
        """Look a template up by its category and slug, scoped to a mode if given."""
        full_id = f"{category_id}:{template_id}"
        if mode is None:
            return self._templates.get(full_id)
        category = self.get_category(mode, category_id)
        if category is None:
            return None
        return next((t for t in category.templates if t.id == full_id), None)

    def get_category(self, mode: Optional[str], category_id: str) -> Optional[CompiledCategory]:
        return self._modes.get(mode, {}).get(category_id)

    def get_templates_by_mode(self, mode: str) -> list[CompiledCategory]:
        return list(self._modes.get(mode, {}).values())

    def get_modes(self) -> list[str]:
        """Modes with at least one compiled template."""
        return [
            mode for mode, categories in self._modes.items()
            if mode is not None and any(c.templates for c in categories.values())
        ]

    def get_all_templates(self) -> list[CompiledTemplate]:
        return list(self._templates.values())

    def get_all_categories(self) -> list[CompiledCategory]:
        return [c for categories in self._modes.values() for c in categories.values()]

    def render_template(self, template_id: str, variables: Mapping[str, Any]) -> RenderResult:
        """
        Render a compiled template under the engine policy.

        Raises:
            TemplateNotFoundError: Unknown template id
            TemplateError: A variable is missing under the ``error`` policy
        """
        template = self.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return self.engine.render_final(template.content, variables)
