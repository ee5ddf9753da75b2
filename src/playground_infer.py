"""java-playground-kit: infer project parameters from an already generated project."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

SETTINGS_FILE = "settings.gradle"
BUILD_FILE = "build.gradle"
MAIN_SOURCE_DIR = "src/main/java"

QUOTED_RE = re.compile(r"""(['"])(.*?)\1""")
PACKAGE_RE = re.compile(r"^package\s+([\w.]+)\s*;", re.MULTILINE)


@dataclass(frozen=True)
class InferenceDefaults:
    """Values used for anything that could not be read from the project."""

    project_name: str = "unknown"
    group_id: str = "com.playground"
    version: str = "1.0-SNAPSHOT"
    base_package: str = "com.playground.unknown"
    glue_suffix: str = ".cucumber"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError):
        return None


def quoted_value(line: str) -> str | None:
    """Return the last quoted literal on a line, or None."""
    matches = QUOTED_RE.findall(line)
    if not matches:
        return None
    return matches[-1][1] or None


@dataclass(frozen=True)
class LineExtractor:
    """Take the quoted value from the first line of a file matching ``pattern``."""

    relative_path: str
    pattern: str

    def __call__(self, project_dir: Path) -> str | None:
        content = _read_text(project_dir / self.relative_path)
        if content is None:
            return None
        line_re = re.compile(self.pattern)
        for line in content.splitlines():
            if line_re.search(line):
                return quoted_value(line)
        return None


@dataclass(frozen=True)
class PackageDeclarationExtractor:
    """Read the package declaration of the first Java source under ``source_root``.

    Files are visited in lexical path order so the result is stable.
    """

    source_root: str = MAIN_SOURCE_DIR

    def __call__(self, project_dir: Path) -> str | None:
        root = project_dir / self.source_root
        if not root.is_dir():
            return None
        sources = sorted(p for p in root.rglob("*.java") if p.is_file())
        if not sources:
            return None
        content = _read_text(sources[0])
        if content is None:
            return None
        match = PACKAGE_RE.search(content)
        return match.group(1) if match else None


Extractor = Callable[[Path], "str | None"]

DEFAULT_EXTRACTORS: dict[str, Extractor] = {
    "PROJECT_NAME": LineExtractor(SETTINGS_FILE, r"rootProject\.name"),
    "GROUP_ID": LineExtractor(BUILD_FILE, r"^group\s*="),
    "VERSION": LineExtractor(BUILD_FILE, r"^version\s*="),
    "CUCUMBER_GLUE_PACKAGE": LineExtractor(BUILD_FILE, r"cucumber\.glue"),
    "BASE_PACKAGE": PackageDeclarationExtractor(),
}


def infer(
    project_dir: Path,
    defaults: InferenceDefaults | None = None,
    extractors: dict[str, Extractor] | None = None,
) -> dict[str, str]:
    """Derive the variable mapping of an existing project.

    Every field is looked up with its extractor. A missing base package falls
    back to the glue package minus its suffix, and whatever is still missing
    takes the value from ``defaults``. Never raises for missing or malformed
    files.
    """
    defaults = defaults or InferenceDefaults()
    extractors = DEFAULT_EXTRACTORS if extractors is None else extractors

    found: dict[str, str | None] = {}
    for key in ("PROJECT_NAME", "GROUP_ID", "VERSION", "CUCUMBER_GLUE_PACKAGE", "BASE_PACKAGE"):
        extractor = extractors.get(key)
        found[key] = extractor(project_dir) if extractor else None

    glue_package = found["CUCUMBER_GLUE_PACKAGE"]
    base_package = found["BASE_PACKAGE"]
    if not base_package and glue_package:
        base_package = glue_package.removesuffix(defaults.glue_suffix)

    base_package = base_package or defaults.base_package
    return {
        "PROJECT_NAME": found["PROJECT_NAME"] or defaults.project_name,
        "GROUP_ID": found["GROUP_ID"] or defaults.group_id,
        "VERSION": found["VERSION"] or defaults.version,
        "BASE_PACKAGE": base_package,
        "CUCUMBER_GLUE_PACKAGE": glue_package or base_package + defaults.glue_suffix,
    }
