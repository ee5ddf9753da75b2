"""End-to-end scenarios for playground-create."""

from __future__ import annotations

import shutil
import stat
import subprocess
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest
import requests
from approvaltests import verify

import playground_create
from playground_create import (
    DOWNLOAD_TIMEOUT,
    INITIAL_COMMIT_MESSAGE,
    WRAPPER_JAR_URL,
    CreateError,
    download_wrapper_jar,
    project_variables,
    to_package,
)
from playground_templates import TEMPLATES_DIR

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

JAR_BYTES = b"PK\x03\x04gradle-wrapper"

EXPECTED_FILES = [
    ".github/copilot-instructions.md",
    ".gitignore",
    ".vscode/settings.json",
    "README.md",
    "build.gradle",
    "gradle/wrapper/gradle-wrapper.jar",
    "gradle/wrapper/gradle-wrapper.properties",
    "gradlew",
    "gradlew.bat",
    "settings.gradle",
    "src/cucumber/java/com/acme/demo/app/cucumber/CucumberTestRunner.java",
    "src/cucumber/java/com/acme/demo/app/cucumber/SampleSteps.java",
    "src/cucumber/resources/sample.feature",
    "src/main/java/com/acme/demo/app/Main.java",
    "src/test/java/com/acme/demo/app/MainTest.java",
]


def fake_session(content: bytes = JAR_BYTES) -> MagicMock:
    """A requests.Session stand-in whose get() returns content."""
    session = MagicMock()
    session.get.return_value = MagicMock(content=content)
    return session


def run_create(*argv: str, session: MagicMock | None = None) -> tuple[int, str, str]:
    """Run playground_create.main() with a fake HTTP session, capturing stdout/stderr."""
    session = session or fake_session()
    stdout, stderr = StringIO(), StringIO()
    with patch("sys.stdout", stdout), patch("sys.stderr", stderr):
        with patch("playground_create.requests.Session", return_value=session):
            exit_code = playground_create.main(list(argv))
    return exit_code, stdout.getvalue(), stderr.getvalue()


def dir_tree(root: Path) -> list[str]:
    """Sorted relative paths of all files under root."""
    return sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestNewProject_1:
    def test_1_creates_full_structure(self, tmp_path: Path) -> None:
        exit_code, stdout, stderr = run_create("demo-app", str(tmp_path), "-g", "com.acme", "--no-git")

        project = tmp_path / "demo-app"
        assert exit_code == 0, stderr
        assert dir_tree(project) == EXPECTED_FILES
        assert (project / "gradle" / "wrapper" / "gradle-wrapper.jar").read_bytes() == JAR_BYTES
        assert "  created: build.gradle" in stdout
        assert "  created: gradle/wrapper/gradle-wrapper.jar (Gradle 8.10.2)" in stdout
        assert "project created successfully" in stdout
        assert f"  1. cd {project}" in stdout

    def test_2_gradlew_is_executable(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "-g", "com.acme", "--no-git")

        mode = (tmp_path / "demo-app" / "gradlew").stat().st_mode
        assert mode & stat.S_IXUSR

    def test_3_no_placeholders_left(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "--no-git")

        project = tmp_path / "demo-app"
        for rel in dir_tree(project):
            if rel.endswith(".jar"):
                continue
            assert "{{" not in (project / rel).read_text(), rel

    def test_4_empty_source_roots_exist(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "-g", "com.acme", "--no-git")

        project = tmp_path / "demo-app"
        for rel in ("src/main/java/com/acme/demo/app", "src/test/java/com/acme/demo/app", "src/cucumber/resources"):
            assert (project / rel).is_dir(), rel

    def test_5_summary_lists_configuration(self, tmp_path: Path) -> None:
        _, stdout, _ = run_create("demo-app", str(tmp_path), "-g", "com.acme", "-v", "0.3.0", "--no-git")

        assert "  Project Name:        demo-app" in stdout
        assert "  Group ID:            com.acme" in stdout
        assert "  Version:             0.3.0" in stdout
        assert "  Base Package:        com.acme.demo.app" in stdout
        assert "  Cucumber Glue:       com.acme.demo.app.cucumber" in stdout
        assert "  Main Class:          com.acme.demo.app.Main" in stdout


class TestVariables_2:
    def test_1_defaults(self) -> None:
        variables = project_variables("myPlayground")

        assert variables["GROUP_ID"] == "com.playground"
        assert variables["VERSION"] == "1.0-SNAPSHOT"
        assert variables["BASE_PACKAGE"] == "com.playground.myplayground"
        assert variables["CUCUMBER_GLUE_PACKAGE"] == "com.playground.myplayground.cucumber"
        assert variables["PROJECT_TITLE"] == "myPlayground"
        assert variables["PROJECT_DESCRIPTION"] == "various Java concepts and patterns"
        assert variables["PACKAGE_PATH"] == "com/playground/myplayground"

    def test_2_explicit_package_wins(self) -> None:
        variables = project_variables("demo", group_id="com.acme", base_package="io.sample")

        assert variables["BASE_PACKAGE"] == "io.sample"
        assert variables["CUCUMBER_GLUE_PACKAGE"] == "io.sample.cucumber"
        assert variables["MAIN_CLASS"] == "io.sample.Main"

    def test_3_project_name_to_package_segment(self) -> None:
        assert to_package("demo-app") == "demo.app"
        assert to_package("My_Play Ground-2") == "myplayground.2"

    def test_4_custom_package_reaches_the_layout(self, tmp_path: Path) -> None:
        exit_code, _, _ = run_create("demo", str(tmp_path), "-p", "io.sample", "--no-git")

        project = tmp_path / "demo"
        assert exit_code == 0
        assert (project / "src" / "main" / "java" / "io" / "sample" / "Main.java").is_file()
        assert "mainClass = 'io.sample.Main'" in (project / "build.gradle").read_text()


class TestWrapperDownload_3:
    def test_1_fetches_the_pinned_wrapper(self, tmp_path: Path) -> None:
        session = fake_session()

        download_wrapper_jar(tmp_path / "gradle" / "wrapper" / "gradle-wrapper.jar", session)

        session.get.assert_called_once_with(WRAPPER_JAR_URL, timeout=DOWNLOAD_TIMEOUT)
        assert (tmp_path / "gradle" / "wrapper" / "gradle-wrapper.jar").read_bytes() == JAR_BYTES

    def test_2_network_failure_exits_non_zero(self, tmp_path: Path) -> None:
        session = fake_session()
        session.get.side_effect = requests.ConnectionError("network unreachable")

        exit_code, stdout, stderr = run_create("demo-app", str(tmp_path), "--no-git", session=session)

        assert exit_code == 1
        assert "failed to download gradle-wrapper.jar" in stderr
        assert "project created successfully" not in stdout
        assert not (tmp_path / "demo-app").exists()

    def test_3_http_error_is_a_failure(self, tmp_path: Path) -> None:
        session = fake_session()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

        with pytest.raises(CreateError):
            download_wrapper_jar(tmp_path / "gradle-wrapper.jar", session)

        assert not (tmp_path / "gradle-wrapper.jar").exists()

    def test_4_empty_body_is_a_failure(self, tmp_path: Path) -> None:
        exit_code, _, stderr = run_create("demo-app", str(tmp_path), "--no-git", session=fake_session(b""))

        assert exit_code == 1
        assert "empty response" in stderr


class TestRenderedFiles_4:
    def test_1_build_gradle(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "-g", "com.acme", "--no-git")
        verify((tmp_path / "demo-app" / "build.gradle").read_text())

    def test_2_cucumber_runner(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "-g", "com.acme", "--no-git")
        runner = tmp_path / "demo-app" / "src/cucumber/java/com/acme/demo/app/cucumber/CucumberTestRunner.java"
        verify(runner.read_text())

    def test_3_readme(self, tmp_path: Path) -> None:
        run_create(
            "demo-app",
            str(tmp_path),
            "-g",
            "com.acme",
            "-t",
            "Demo App",
            "-d",
            "design patterns",
            "--no-git",
        )
        verify((tmp_path / "demo-app" / "README.md").read_text())

    def test_4_settings_gradle(self, tmp_path: Path) -> None:
        run_create("demo-app", str(tmp_path), "--no-git")
        assert (tmp_path / "demo-app" / "settings.gradle").read_text() == "rootProject.name = 'demo-app'\n"


class TestExistingDirectory_5:
    def _existing(self, tmp_path: Path) -> Path:
        project = tmp_path / "demo-app"
        project.mkdir()
        (project / "notes.txt").write_text("keep me\n")
        return project

    def test_1_declining_leaves_directory_untouched(self, tmp_path: Path) -> None:
        project = self._existing(tmp_path)

        with patch("builtins.input", return_value="n"):
            exit_code, stdout, stderr = run_create("demo-app", str(tmp_path), "--no-git")

        assert exit_code == 0
        assert "directory already exists" in stderr
        assert "operation cancelled" in stdout
        assert dir_tree(project) == ["notes.txt"]

    def test_2_confirming_replaces_directory(self, tmp_path: Path) -> None:
        project = self._existing(tmp_path)

        with patch("builtins.input", return_value="y"):
            exit_code, _, _ = run_create("demo-app", str(tmp_path), "--no-git")

        assert exit_code == 0
        assert not (project / "notes.txt").exists()
        assert (project / "build.gradle").is_file()

    def test_3_force_skips_the_prompt(self, tmp_path: Path) -> None:
        project = self._existing(tmp_path)

        with patch("builtins.input") as prompt:
            exit_code, _, _ = run_create("demo-app", str(tmp_path), "--force", "--no-git")

        assert exit_code == 0
        assert prompt.call_count == 0
        assert not (project / "notes.txt").exists()

    def test_4_closed_stdin_counts_as_no(self, tmp_path: Path) -> None:
        project = self._existing(tmp_path)

        with patch("builtins.input", side_effect=EOFError):
            exit_code, stdout, _ = run_create("demo-app", str(tmp_path), "--no-git")

        assert exit_code == 0
        assert "operation cancelled" in stdout
        assert (project / "notes.txt").read_text() == "keep me\n"

    def test_5_regular_file_in_the_way(self, tmp_path: Path) -> None:
        blocker = tmp_path / "demo-app"
        blocker.write_text("not a project\n")

        with patch("builtins.input") as prompt:
            exit_code, _, stderr = run_create("demo-app", str(tmp_path), "--force", "--no-git")

        assert exit_code == 1
        assert f"playground-create: error: not a directory: {blocker}" in stderr
        assert prompt.call_count == 0
        assert blocker.read_text() == "not a project\n"


class TestGitInit_6:
    def test_1_initial_commit(self, tmp_path: Path) -> None:
        with patch("playground_create.subprocess.run") as run:
            exit_code, stdout, _ = run_create("demo-app", str(tmp_path))

        project = tmp_path / "demo-app"
        assert exit_code == 0
        assert run.call_args_list == [
            call(["git", "init"], cwd=project, capture_output=True, check=True),
            call(["git", "add", "."], cwd=project, capture_output=True, check=True),
            call(["git", "commit", "-m", INITIAL_COMMIT_MESSAGE], cwd=project, capture_output=True, check=True),
        ]
        assert "git repository initialised" in stdout

    def test_2_git_failure_is_only_a_warning(self, tmp_path: Path) -> None:
        error = subprocess.CalledProcessError(128, ["git", "commit"])
        with patch("playground_create.subprocess.run", side_effect=[None, None, error]):
            exit_code, stdout, stderr = run_create("demo-app", str(tmp_path))

        assert exit_code == 0
        assert "WARNING: git initialisation failed" in stderr
        assert "git repository initialised" not in stdout
        assert "project created successfully" in stdout

    def test_3_missing_git_binary_is_only_a_warning(self, tmp_path: Path) -> None:
        with patch("playground_create.subprocess.run", side_effect=FileNotFoundError("git")):
            exit_code, _, stderr = run_create("demo-app", str(tmp_path))

        assert exit_code == 0
        assert "WARNING" in stderr

    def test_4_no_git_flag(self, tmp_path: Path) -> None:
        with patch("playground_create.subprocess.run") as run:
            run_create("demo-app", str(tmp_path), "--no-git")

        assert run.call_count == 0


class TestTemplatesDirectory_7:
    def test_1_environment_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        templates = tmp_path / "templates"
        shutil.copytree(TEMPLATES_DIR, templates)
        (templates / "settings.gradle.template").write_text("// custom\nrootProject.name = '{{PROJECT_NAME}}'\n")
        monkeypatch.setenv("PLAYGROUND_TEMPLATES", str(templates))

        exit_code, _, _ = run_create("demo-app", str(tmp_path / "out"), "--no-git")

        assert exit_code == 0
        assert (tmp_path / "out" / "demo-app" / "settings.gradle").read_text().startswith("// custom\n")

    def test_2_missing_template_exits_non_zero(self, tmp_path: Path) -> None:
        templates = tmp_path / "templates"
        templates.mkdir()

        exit_code, stdout, stderr = run_create("demo-app", str(tmp_path / "out"), "--templates", str(templates), "--no-git")

        assert exit_code == 1
        assert "playground-create: error:" in stderr
        assert "project created successfully" not in stdout
