"""
Layer boundaries.

1. donation_kernel/** may NOT import donation_config, donation_services or
   donation_api.  The kernel never depends upward.

2. donation_services/** may NOT import donation_api.

3. Within donation_config only bridges.py reaches into the kernel.

4. The web stack stays in donation_api and token handling stays in
   donation_services.

These tests read source code via AST.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """(line_number, module) for every import in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...], allow: tuple[str, ...] = ()) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        if filepath.name in allow:
            continue
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestNoUpwardDependencies:
    def test_packages_exist(self):
        for package in ("donation_kernel", "donation_config", "donation_services", "donation_api"):
            assert _python_files(package), package

    def test_kernel_is_self_contained(self):
        violations = _violations(
            "donation_kernel", ("donation_config", "donation_services", "donation_api")
        )
        assert not violations, "kernel imports an upper layer:\n" + "\n".join(violations)

    def test_services_do_not_import_api(self):
        violations = _violations("donation_services", ("donation_api",))
        assert not violations, "\n".join(violations)

    def test_config_reaches_kernel_only_through_bridges(self):
        violations = _violations("donation_config", ("donation_kernel",), allow=("bridges.py",))
        assert not violations, "\n".join(violations)


class TestThirdPartyPlacement:
    def test_web_stack_only_in_api(self):
        for package in ("donation_kernel", "donation_config", "donation_services"):
            violations = _violations(package, ("fastapi", "starlette", "uvicorn"))
            assert not violations, "\n".join(violations)

    def test_jwt_only_in_services(self):
        for package in ("donation_kernel", "donation_config", "donation_api"):
            violations = _violations(package, ("jwt",))
            assert not violations, "\n".join(violations)
