"""java-playground-kit: create a new Java/Gradle/Cucumber playground project."""

from __future__ import annotations

import argparse
import re
import shutil
import stat
import subprocess
import sys
from pathlib import Path

import requests

from playground_templates import (
    GLUE_SUFFIX,
    PROJECT_FILES,
    TEMPLATES_DIR,
    TEMPLATES_ENV,
    derive_variables,
    load_template,
    render,
    resolve_templates_dir,
)

DEFAULT_GROUP_ID = "com.playground"
DEFAULT_VERSION = "1.0-SNAPSHOT"
DEFAULT_DESCRIPTION = "various Java concepts and patterns"

GRADLE_VERSION = "8.10.2"
WRAPPER_JAR = "gradle/wrapper/gradle-wrapper.jar"
WRAPPER_JAR_URL = (
    f"https://raw.githubusercontent.com/gradle/gradle/v{GRADLE_VERSION}/gradle/wrapper/gradle-wrapper.jar"
)
DOWNLOAD_TIMEOUT = 60
INITIAL_COMMIT_MESSAGE = "Initial commit from template"

# Created up front so empty source roots exist even if no template lands there.
PROJECT_DIRS = (
    "src/main/java/{{PACKAGE_PATH}}",
    "src/test/java/{{PACKAGE_PATH}}",
    "src/cucumber/java/{{PACKAGE_PATH}}/cucumber",
    "src/cucumber/resources",
    ".vscode",
    "gradle/wrapper",
)

_NON_PACKAGE_RE = re.compile(r"[^a-z0-9.]")


class CreateError(RuntimeError):
    pass


def to_package(name: str) -> str:
    """'My-Playground' → 'my.playground'."""
    return _NON_PACKAGE_RE.sub("", name.lower().replace("-", "."))


def project_variables(
    project_name: str,
    *,
    group_id: str | None = None,
    version: str | None = None,
    base_package: str | None = None,
    title: str | None = None,
    description: str | None = None,
) -> dict[str, str]:
    """Build the variable mapping for a new project, filling in defaults."""
    group_id = group_id or DEFAULT_GROUP_ID
    base_package = base_package or f"{group_id}.{to_package(project_name)}"
    variables = {
        "PROJECT_NAME": project_name,
        "GROUP_ID": group_id,
        "VERSION": version or DEFAULT_VERSION,
        "BASE_PACKAGE": base_package,
        "CUCUMBER_GLUE_PACKAGE": base_package + GLUE_SUFFIX,
        "PROJECT_TITLE": title or project_name,
        "PROJECT_DESCRIPTION": description or DEFAULT_DESCRIPTION,
    }
    return derive_variables(variables)


def confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} (y/N) ")
    except EOFError:
        return False
    return answer.strip().lower().startswith("y")


def download_wrapper_jar(dest: Path, session: requests.Session | None = None) -> None:
    """Fetch gradle-wrapper.jar. Raises CreateError if nothing usable arrives."""
    http = session or requests.Session()
    try:
        res = http.get(WRAPPER_JAR_URL, timeout=DOWNLOAD_TIMEOUT)
        res.raise_for_status()
    except requests.RequestException as exc:
        raise CreateError(f"failed to download gradle-wrapper.jar: {exc}") from exc
    if not res.content:
        raise CreateError("failed to download gradle-wrapper.jar: empty response")
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(res.content)


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def init_git_repo(project_dir: Path) -> bool:
    """git init + initial commit. Returns False (with a warning) if git fails."""
    try:
        for cmd in (
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", INITIAL_COMMIT_MESSAGE],
        ):
            subprocess.run(cmd, cwd=project_dir, capture_output=True, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as exc:
        print(f"playground-create: WARNING: git initialisation failed ({exc})", file=sys.stderr)
        return False
    return True


# ---------------------------------------------------------------------------
# Create logic
# ---------------------------------------------------------------------------


def create(
    project_name: str,
    target_dir: Path,
    variables: dict[str, str],
    *,
    overwrite: bool = False,
    init_git: bool = True,
    templates_dir: Path = TEMPLATES_DIR,
    session: requests.Session | None = None,
) -> int:
    """Render a complete project into target_dir/project_name.

    Returns 0, also when the user declines to replace an existing directory.
    Raises CreateError if the wrapper jar cannot be fetched or the project
    path is not a directory, and FileNotFoundError if a template is missing.
    """
    project_dir = target_dir / project_name

    print("playground-create: creating new Java playground project")
    print(f"  Project Name:        {project_name}")
    print(f"  Target Directory:    {project_dir}")
    print(f"  Group ID:            {variables['GROUP_ID']}")
    print(f"  Version:             {variables['VERSION']}")
    print(f"  Base Package:        {variables['BASE_PACKAGE']}")
    print(f"  Cucumber Glue:       {variables['CUCUMBER_GLUE_PACKAGE']}")
    print(f"  Main Class:          {variables['MAIN_CLASS']}")

    if project_dir.exists() and not project_dir.is_dir():
        raise CreateError(f"not a directory: {project_dir}")
    if project_dir.exists():
        print(f"playground-create: directory already exists: {project_dir}", file=sys.stderr)
        if not overwrite and not confirm("Do you want to overwrite it?"):
            print("playground-create: operation cancelled")
            return 0
        shutil.rmtree(project_dir)

    # Nothing else is written until the wrapper jar has arrived.
    download_wrapper_jar(project_dir / WRAPPER_JAR, session)

    for dir_pattern in PROJECT_DIRS:
        (project_dir / render(dir_pattern, variables)).mkdir(parents=True, exist_ok=True)

    for template_name, target_pattern in PROJECT_FILES:
        rel_path = render(target_pattern, variables)
        dest = project_dir / rel_path
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(load_template(template_name, variables, templates_dir))
        print(f"  created: {rel_path}")

    make_executable(project_dir / "gradlew")
    print(f"  created: {WRAPPER_JAR} (Gradle {GRADLE_VERSION})")

    if init_git and init_git_repo(project_dir):
        print("playground-create: git repository initialised")

    print("playground-create: project created successfully.")
    print("Next steps:")
    print(f"  1. cd {project_dir}")
    print("  2. ./gradlew build          # build the project")
    print("  3. ./gradlew test           # run JUnit tests")
    print("  4. ./gradlew cucumber       # run Cucumber tests")
    return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="playground-create",
        description="Create a new Java playground project from the templates.",
    )
    parser.add_argument("project_name", help="Name of the project (e.g. 'myPlayground').")
    parser.add_argument("target_dir", help="Directory in which the project directory is created.")
    parser.add_argument("-g", "--group-id", default=None, help=f"Maven group ID (default: {DEFAULT_GROUP_ID}).")
    parser.add_argument("-v", "--version", default=None, help=f"Project version (default: {DEFAULT_VERSION}).")
    parser.add_argument(
        "-p",
        "--package",
        default=None,
        help="Base package name (default: derived from group ID and project name).",
    )
    parser.add_argument("-t", "--title", default=None, help="Project title for the README (default: project name).")
    parser.add_argument("-d", "--description", default=None, help="Project description.")
    parser.add_argument("--force", action="store_true", help="Replace an existing project directory without asking.")
    parser.add_argument("--no-git", action="store_true", help="Do not initialise a git repository.")
    parser.add_argument(
        "--templates",
        default=None,
        help=f"Directory holding the template files. Defaults to ${TEMPLATES_ENV} or the bundled templates.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for playground-create command."""
    args = parse_args(argv)

    variables = project_variables(
        args.project_name,
        group_id=args.group_id,
        version=args.version,
        base_package=args.package,
        title=args.title,
        description=args.description,
    )

    try:
        return create(
            args.project_name,
            Path(args.target_dir),
            variables,
            overwrite=args.force,
            init_git=not args.no_git,
            templates_dir=resolve_templates_dir(args.templates),
        )
    except (CreateError, FileNotFoundError) as exc:
        print(f"playground-create: error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
