"""java-playground-kit: bundled project templates and the placeholder engine."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATES_ENV = "PLAYGROUND_TEMPLATES"

# Keys a template may reference as {{KEY}}. Anything else is left as written.
TOKENS = (
    "PROJECT_NAME",
    "GROUP_ID",
    "VERSION",
    "BASE_PACKAGE",
    "CUCUMBER_GLUE_PACKAGE",
    "PROJECT_TITLE",
    "PROJECT_DESCRIPTION",
    "MAIN_CLASS",
    "PACKAGE_PATH",
)
TOKEN_RE = re.compile(r"\{\{(" + "|".join(TOKENS) + r")\}\}")

GLUE_SUFFIX = ".cucumber"

# Canonical layout of a generated project: (template name, target path pattern).
# Target patterns go through render() too, so they may use {{PACKAGE_PATH}}.
PROJECT_FILES: tuple[tuple[str, str], ...] = (
    ("build.gradle.template", "build.gradle"),
    ("settings.gradle.template", "settings.gradle"),
    ("gitignore.template", ".gitignore"),
    ("README.md.template", "README.md"),
    ("vscode-settings.json.template", ".vscode/settings.json"),
    ("gradle-wrapper.properties.template", "gradle/wrapper/gradle-wrapper.properties"),
    ("gradlew.template", "gradlew"),
    ("gradlew.bat.template", "gradlew.bat"),
    (
        "CucumberTestRunner.java.template",
        "src/cucumber/java/{{PACKAGE_PATH}}/cucumber/CucumberTestRunner.java",
    ),
    ("Main.java.template", "src/main/java/{{PACKAGE_PATH}}/Main.java"),
    ("MainTest.java.template", "src/test/java/{{PACKAGE_PATH}}/MainTest.java"),
    ("sample.feature.template", "src/cucumber/resources/sample.feature"),
    ("SampleSteps.java.template", "src/cucumber/java/{{PACKAGE_PATH}}/cucumber/SampleSteps.java"),
    ("copilot-instructions.md.template", ".github/copilot-instructions.md"),
)


def render(template: str, variables: Mapping[str, str | None]) -> str:
    """Substitute {{KEY}} tokens in a single pass.

    Only keys from TOKENS that are present in ``variables`` are replaced; a
    ``None`` value renders as the empty string. Unknown tokens and recognized
    tokens without a mapping entry are left verbatim. Substituted text is
    never scanned again, so a value containing ``{{GROUP_ID}}`` stays literal.
    """

    def replacer(match: re.Match) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        return variables[key] or ""

    return TOKEN_RE.sub(replacer, template)


def template_path(name: str, templates_dir: Path = TEMPLATES_DIR) -> Path:
    return templates_dir / name


def load_template(
    name: str,
    variables: Mapping[str, str | None] | None = None,
    templates_dir: Path = TEMPLATES_DIR,
) -> str:
    """Load a template file, rendering it when variables are given.

    Raises FileNotFoundError if the template does not exist.
    """
    content = template_path(name, templates_dir).read_text()
    if variables is None:
        return content
    return render(content, variables)


def derive_variables(variables: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of variables with the BASE_PACKAGE-derived keys filled in.

    PACKAGE_PATH and MAIN_CLASS are always recomputed; CUCUMBER_GLUE_PACKAGE
    is only added when missing or empty.
    """
    derived = dict(variables)
    base_package = derived.get("BASE_PACKAGE", "")
    derived["PACKAGE_PATH"] = base_package.replace(".", "/")
    derived["MAIN_CLASS"] = f"{base_package}.Main"
    if not derived.get("CUCUMBER_GLUE_PACKAGE"):
        derived["CUCUMBER_GLUE_PACKAGE"] = base_package + GLUE_SUFFIX
    return derived


def resolve_templates_dir(arg: str | None = None) -> Path:
    """Pick the templates directory: explicit argument, then $PLAYGROUND_TEMPLATES, then the bundled set."""
    if arg:
        return Path(arg).resolve()
    env_templates = os.environ.get(TEMPLATES_ENV)
    if env_templates:
        return Path(env_templates).resolve()
    return TEMPLATES_DIR
