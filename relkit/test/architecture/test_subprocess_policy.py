from __future__ import annotations

from ._gate import require_arch_checks_enabled
from ._utils import iter_python_files, parse_imports, relkit_root


def test_subprocess_is_only_imported_by_process_module() -> None:
    require_arch_checks_enabled()

    root = relkit_root()
    allowlist = {"platform/process.py"}

    offenders: list[str] = []
    for file_path in iter_python_files(root):
        rel = file_path.relative_to(root)
        if rel.parts and rel.parts[0] == "test":
            continue
        if rel.as_posix() in allowlist:
            continue
        for item in parse_imports(file_path):
            if item.module == "subprocess":
                offenders.append(f"{rel}:{item.line}: direct subprocess import")

    assert not offenders, "subprocess policy violations:\n" + "\n".join(offenders)
