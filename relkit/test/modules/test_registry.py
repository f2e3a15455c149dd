"""Tests for modules/registry.py."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.modules.registry import LocalModuleRegistry, input_env_var

ECHO_PAYLOAD = (
    "import json, os\n"
    "payload = json.loads(os.environ['RELKIT_PAYLOAD'])\n"
    "print(os.environ['RELKIT_ACTION'], payload['release']['version'])\n"
)
FAIL = "import sys\nsys.stderr.write('upload refused')\nsys.exit(2)\n"
RUNTIME = (
    "import os, sys\n"
    "print(os.environ['RELKIT_INPUT_TARGET_ENV'], ' '.join(sys.argv[1:]), os.getcwd())\n"
    "sys.exit(int(os.environ.get('RELKIT_INPUT_CODE', '0')))\n"
)


@pytest.fixture
def modules_dir(tmp_path: Path) -> Path:
    root = tmp_path / "modules"
    github = root / "github"
    github.mkdir(parents=True)
    (github / "module.json").write_text(
        json.dumps(
            {
                "actions": [
                    {"id": "release.publish", "command": [sys.executable, "-c", ECHO_PAYLOAD]},
                    {"id": "release.fail", "command": [sys.executable, "-c", FAIL]},
                ],
                "runtime": {"run": [sys.executable, "-c", RUNTIME]},
            }
        ),
        encoding="utf-8",
    )
    (root / "empty").mkdir()
    return root


PAYLOAD = {"release": {"version": "1.3.0"}}


def test_input_env_var() -> None:
    assert input_env_var("target-env") == "RELKIT_INPUT_TARGET_ENV"
    assert input_env_var("a.b") == "RELKIT_INPUT_A_B"


class TestLoading:
    def test_available_ids_require_manifest(self, modules_dir: Path) -> None:
        assert LocalModuleRegistry(modules_dir).available_ids() == ["github"]

    def test_missing_modules_dir(self, tmp_path: Path) -> None:
        registry = LocalModuleRegistry(tmp_path / "absent")
        assert registry.available_ids() == []

    def test_load_is_cached(self, modules_dir: Path) -> None:
        registry = LocalModuleRegistry(modules_dir)

        first = registry.load("github")
        second = registry.load("github")

        assert isinstance(first, Ok) and isinstance(second, Ok)
        assert first.value is second.value

    def test_unknown_module_lists_available(self, modules_dir: Path) -> None:
        result = LocalModuleRegistry(modules_dir).load("s3")

        assert isinstance(result, Err)
        assert result.error.message == "Module 's3' not found (available: github)"


class TestExecuteAction:
    def test_payload_is_passed_as_json(self, modules_dir: Path) -> None:
        result = LocalModuleRegistry(modules_dir).execute_action(
            "github", "release.publish", PAYLOAD
        )

        assert isinstance(result, Ok)
        assert result.value["exitCode"] == 0
        assert result.value["stdout"] == "release.publish 1.3.0\n"

    def test_non_zero_exit_is_error(self, modules_dir: Path) -> None:
        result = LocalModuleRegistry(modules_dir).execute_action("github", "release.fail", PAYLOAD)

        assert isinstance(result, Err)
        assert result.error.module_id == "github"
        assert result.error.stderr == "upload refused"
        assert "exit 2" in result.error.message

    def test_unknown_action(self, modules_dir: Path) -> None:
        result = LocalModuleRegistry(modules_dir).execute_action("github", "release.x", PAYLOAD)

        assert isinstance(result, Err)
        assert result.error.message == "Module 'github' has no action 'release.x'"


class TestRunRuntime:
    def test_inputs_args_and_working_dir(self, modules_dir: Path, tmp_path: Path) -> None:
        result = LocalModuleRegistry(modules_dir).run_runtime(
            "github",
            inputs=[("target-env", "prod")],
            args=["--fast", "--quiet"],
            payload=PAYLOAD,
            working_dir=tmp_path,
        )

        assert isinstance(result, Ok)
        env, rest = result.value.stdout.strip().split(" ", 1)
        assert env == "prod"
        assert rest.startswith("--fast --quiet ")
        assert Path(rest.removeprefix("--fast --quiet ")).resolve() == tmp_path.resolve()

    def test_non_zero_exit_is_ok(self, modules_dir: Path) -> None:
        result = LocalModuleRegistry(modules_dir).run_runtime(
            "github", inputs=[("target-env", "prod"), ("code", "5")]
        )

        assert isinstance(result, Ok)
        assert result.value.exit_code == 5
        assert result.value.success is False

    def test_module_without_runtime(self, tmp_path: Path) -> None:
        module_dir = tmp_path / "plain"
        module_dir.mkdir()
        (module_dir / "module.json").write_text("{}", encoding="utf-8")

        result = LocalModuleRegistry(tmp_path).run_runtime("plain")

        assert isinstance(result, Err)
        assert result.error.message == "Module 'plain' has no runtime"
