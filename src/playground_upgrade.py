"""java-playground-kit: apply template updates to an existing playground project."""

from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from playground_infer import InferenceDefaults, infer
from playground_templates import (
    TEMPLATES_DIR,
    TEMPLATES_ENV,
    derive_variables,
    render,
    resolve_templates_dir,
    template_path,
)

BACKUP_SUFFIX = ".backup."
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
UPGRADE_DESCRIPTION = "various Java concepts"

UPDATED = "updated"
WOULD_UPDATE = "would-update"
SKIPPED_UNKNOWN = "skipped-unknown"
FAILED_MISSING_TEMPLATE = "failed-missing-template"


class UpgradeError(RuntimeError):
    """The upgrade cannot start; nothing has been modified."""


# ---------------------------------------------------------------------------
# Target resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FixedLocation:
    template: str
    target: str

    def resolve(self, project_dir: Path, variables: dict[str, str]) -> Path:
        return project_dir / render(self.target, variables)


@dataclass(frozen=True)
class SearchThenFallback:
    """Overwrite an existing file wherever it lives, else use the canonical path."""

    template: str
    file_name: str
    search_root: str
    fallback: str

    def resolve(self, project_dir: Path, variables: dict[str, str]) -> Path:
        root = project_dir / self.search_root
        if root.is_dir():
            existing = sorted(p for p in root.rglob(self.file_name) if p.is_file())
            if existing:
                return existing[0]
        return project_dir / render(self.fallback, variables)


MANAGED_FILES: dict[str, FixedLocation | SearchThenFallback] = {
    "build.gradle": FixedLocation("build.gradle.template", "build.gradle"),
    "settings.gradle": FixedLocation("settings.gradle.template", "settings.gradle"),
    ".gitignore": FixedLocation("gitignore.template", ".gitignore"),
    ".vscode/settings.json": FixedLocation("vscode-settings.json.template", ".vscode/settings.json"),
    "CucumberTestRunner": SearchThenFallback(
        "CucumberTestRunner.java.template",
        "CucumberTestRunner.java",
        search_root="src",
        fallback="src/cucumber/java/{{PACKAGE_PATH}}/cucumber/CucumberTestRunner.java",
    ),
}
DEFAULT_UPGRADE_FILES = tuple(MANAGED_FILES)

FILE_DESCRIPTIONS = {
    "build.gradle": "Gradle build configuration",
    "settings.gradle": "Project settings",
    ".gitignore": "Git ignore rules",
    ".vscode/settings.json": "VS Code configuration",
    "CucumberTestRunner": "Cucumber test runner (preserves package)",
}


@dataclass(frozen=True)
class UpgradePlan:
    file_id: str
    template: Path
    target: Path


def resolve_target(
    file_id: str,
    project_dir: Path,
    variables: dict[str, str],
    templates_dir: Path = TEMPLATES_DIR,
) -> UpgradePlan | None:
    """Map a logical file id to its template and target path. None if unknown.

    Does not touch the filesystem beyond searching for existing files.
    """
    rule = MANAGED_FILES.get(file_id)
    if rule is None:
        return None
    return UpgradePlan(
        file_id=file_id,
        template=template_path(rule.template, templates_dir),
        target=rule.resolve(project_dir, variables),
    )


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def has_uncommitted_changes(project_dir: Path) -> bool:
    """Return True if project_dir is a git checkout with uncommitted changes.

    Directories without their own .git entry count as clean, as does a
    machine without git installed.
    """
    if not (project_dir / ".git").exists():
        return False
    try:
        result = subprocess.run(
            ["git", "diff-index", "--quiet", "HEAD", "--"],
            cwd=project_dir,
            capture_output=True,
        )
    except FileNotFoundError:
        return False
    return result.returncode != 0


def backup_path(project_dir: Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    candidate = project_dir.with_name(f"{project_dir.name}{BACKUP_SUFFIX}{stamp}")
    counter = 1
    while candidate.exists():
        candidate = project_dir.with_name(f"{project_dir.name}{BACKUP_SUFFIX}{stamp}_{counter}")
        counter += 1
    return candidate


def create_backup(project_dir: Path, now: datetime | None = None) -> Path:
    """Copy the whole project next to itself and return the copy's path."""
    backup_dir = backup_path(project_dir, now)
    shutil.copytree(project_dir, backup_dir, symlinks=True)
    return backup_dir


# ---------------------------------------------------------------------------
# Upgrade logic
# ---------------------------------------------------------------------------


@dataclass
class FileResult:
    file_id: str
    status: str
    target: Path | None = None
    template: Path | None = None


@dataclass
class UpgradeReport:
    project_dir: Path
    backup_dir: Path | None
    variables: dict[str, str]
    dry_run: bool
    results: list[FileResult] = field(default_factory=list)

    @property
    def failures(self) -> list[FileResult]:
        return [r for r in self.results if r.status in (SKIPPED_UNKNOWN, FAILED_MISSING_TEMPLATE)]

    @property
    def ok(self) -> bool:
        return not self.failures


def render_variables(inferred: dict[str, str]) -> dict[str, str]:
    """Extend an inferred mapping with the values every template expects."""
    variables = dict(inferred)
    variables["PROJECT_TITLE"] = variables["PROJECT_NAME"]
    variables["PROJECT_DESCRIPTION"] = UPGRADE_DESCRIPTION
    return derive_variables(variables)


def upgrade_file(
    file_id: str,
    project_dir: Path,
    variables: dict[str, str],
    *,
    dry_run: bool = False,
    templates_dir: Path = TEMPLATES_DIR,
) -> FileResult:
    plan = resolve_target(file_id, project_dir, variables, templates_dir)
    if plan is None:
        print(f"  unknown: {file_id} (skipped)", file=sys.stderr)
        return FileResult(file_id, SKIPPED_UNKNOWN)

    if not plan.template.is_file():
        print(f"  error: template not found: {plan.template}", file=sys.stderr)
        return FileResult(file_id, FAILED_MISSING_TEMPLATE, plan.target, plan.template)

    rel = _display(plan.target, project_dir)
    if dry_run:
        print(f"  would update: {rel}")
        return FileResult(file_id, WOULD_UPDATE, plan.target, plan.template)

    content = render(plan.template.read_text(), variables)
    plan.target.parent.mkdir(parents=True, exist_ok=True)
    plan.target.write_text(content)
    print(f"  updated: {rel}")
    return FileResult(file_id, UPDATED, plan.target, plan.template)


def upgrade(
    project_dir: Path,
    files: list[str] | tuple[str, ...] | None = None,
    *,
    dry_run: bool = False,
    skip_backup: bool = False,
    force: bool = False,
    templates_dir: Path = TEMPLATES_DIR,
    defaults: InferenceDefaults | None = None,
    now: datetime | None = None,
) -> UpgradeReport:
    """Re-render managed files of an existing project in place.

    ``files=None`` selects every managed file; an empty list selects none.
    Raises UpgradeError, before touching anything, when the directory is
    missing or has uncommitted changes and ``force`` is not set. The backup
    (unless skipped or dry-run) is complete before the first file is written.
    """
    if not project_dir.is_dir():
        raise UpgradeError(f"directory does not exist: {project_dir}")
    project_dir = project_dir.resolve()

    print(f"playground-upgrade: upgrading project at {project_dir}")

    if not force and has_uncommitted_changes(project_dir):
        raise UpgradeError(
            "project has uncommitted changes; commit or stash them first, or use --force"
        )

    backup_dir = None
    if not dry_run and not skip_backup:
        backup_dir = create_backup(project_dir, now)
        print(f"  backup: {backup_dir}")

    variables = render_variables(infer(project_dir, defaults))
    _print_variables(variables)

    report = UpgradeReport(project_dir, backup_dir, variables, dry_run)
    if dry_run:
        print("playground-upgrade: DRY RUN, no files will be modified")

    for file_id in DEFAULT_UPGRADE_FILES if files is None else files:
        report.results.append(
            upgrade_file(file_id, project_dir, variables, dry_run=dry_run, templates_dir=templates_dir)
        )

    return report


def _display(path: Path, project_dir: Path) -> str:
    try:
        return str(path.relative_to(project_dir))
    except ValueError:
        return str(path)


def _print_variables(variables: dict[str, str]) -> None:
    print("playground-upgrade: project configuration")
    print(f"  Project Name:        {variables['PROJECT_NAME']}")
    print(f"  Group ID:            {variables['GROUP_ID']}")
    print(f"  Version:             {variables['VERSION']}")
    print(f"  Base Package:        {variables['BASE_PACKAGE']}")
    print(f"  Cucumber Glue:       {variables['CUCUMBER_GLUE_PACKAGE']}")


def _print_summary(report: UpgradeReport) -> None:
    if not report.ok:
        print(
            f"playground-upgrade: finished with {len(report.failures)} error(s): "
            + ", ".join(r.file_id for r in report.failures),
            file=sys.stderr,
        )
    elif report.dry_run:
        print("playground-upgrade: dry run completed, no changes made.")
    else:
        print("playground-upgrade: project upgraded successfully.")

    if report.dry_run:
        return
    if report.backup_dir is not None:
        print(f"  backup location: {report.backup_dir}")
        print(
            f"  restore with: rm -rf {report.project_dir} && mv {report.backup_dir} {report.project_dir}"
        )
    print("Next steps:")
    print(f"  1. cd {report.project_dir}")
    print("  2. ./gradlew clean build    # verify the build still works")
    print("  3. ./gradlew check          # run all tests")
    print("  4. git diff                 # review changes")
    print("  5. git add -A && git commit # commit if satisfied")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    available = "\n".join(f"  {name:<22} {desc}" for name, desc in FILE_DESCRIPTIONS.items())
    parser = argparse.ArgumentParser(
        prog="playground-upgrade",
        description="Upgrade an existing Java playground project with the latest template changes.",
        epilog=f"Available files to upgrade:\n{available}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("project_dir", help="Path to the existing project directory.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without making changes.",
    )
    parser.add_argument(
        "--files",
        default=None,
        help="Comma-separated list of files to update (e.g. build.gradle,settings.gradle).",
    )
    parser.add_argument("--skip-backup", action="store_true", help="Skip creating a backup before upgrading.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Upgrade even if the project has uncommitted changes.",
    )
    parser.add_argument(
        "--templates",
        default=None,
        help=f"Directory holding the template files. Defaults to ${TEMPLATES_ENV} or the bundled templates.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for playground-upgrade command."""
    args = parse_args(argv)

    files = None
    if args.files is not None:
        files = [f.strip() for f in args.files.split(",") if f.strip()]

    try:
        report = upgrade(
            Path(args.project_dir),
            files,
            dry_run=args.dry_run,
            skip_backup=args.skip_backup,
            force=args.force,
            templates_dir=resolve_templates_dir(args.templates),
        )
    except UpgradeError as exc:
        print(f"playground-upgrade: error: {exc}", file=sys.stderr)
        return 1

    _print_summary(report)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
