#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import subprocess
import sys
from pathlib import Path

import workspace_config

# FHEVM Project Runner
# Installs, compiles and tests generated Hardhat projects through npm.

TIMEOUT_EXIT = 124
MISSING_EXIT = 127
PROJECT_PREFIXES = ("fhevm-example-", "fhevm-examples-")

STEPS = (
    ("install", ["npm", "install"], "INSTALL_TIMEOUT", "Failed to install dependencies"),
    ("compile", ["npm", "run", "compile"], "COMPILE_TIMEOUT", "Compilation failed"),
    ("test", ["npm", "run", "test"], "TEST_TIMEOUT", "Tests failed"),
)


def run(command, cwd, timeout=None):
    """Run one command and capture its output; process failures are reported, not raised."""
    try:
        res = subprocess.run(command, cwd=cwd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return {"exit_code": TIMEOUT_EXIT, "stdout": "", "stderr": f"{' '.join(command)} timed out after {timeout}s"}
    except FileNotFoundError:
        return {"exit_code": MISSING_EXIT, "stdout": "", "stderr": f"{command[0]}: command not found"}
    return {"exit_code": res.returncode, "stdout": res.stdout, "stderr": res.stderr}


def install_and_test(project_dir):
    result = {"project": Path(project_dir).name, "compiled": False, "tests_passed": False, "error": None, "failed_step": None}
    if not (Path(project_dir) / "package.json").exists():
        result["error"] = "package.json not found"
        return result

    for step, command, timeout_name, message in STEPS:
        print(f"  i {' '.join(command)}")
        res = run(command, project_dir, getattr(workspace_config, timeout_name))
        if res["exit_code"] != 0:
            detail = (res["stderr"] or res["stdout"]).strip().splitlines()
            result["error"] = f"{message}: {detail[-1]}" if detail else message
            result["failed_step"] = step
            return result
        if step == "compile": result["compiled"] = True
        if step == "test": result["tests_passed"] = True
    return result


def find_generated_projects(output_dir):
    output_dir = Path(output_dir)
    if not output_dir.exists(): return []
    return sorted(d for d in output_dir.iterdir() if d.is_dir() and d.name.startswith(PROJECT_PREFIXES))


def validate_generated(output_dir):
    results = []
    for project in find_generated_projects(output_dir):
        print(f"🔍 Validating {project.name}")
        result = install_and_test(project)
        result["type"] = "category" if project.name.startswith("fhevm-examples-") else "example"
        if result["tests_passed"]:
            print(f"  ✅ {project.name}")
        else:
            print(f"  ❌ {project.name}: {result['error']}")
        results.append(result)
    return results


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else os.path.join(workspace_config.PROJECT_ROOT, workspace_config.OUTPUT_DIR)
    results = validate_generated(target)
    if not results:
        print(f"  ⚠️  No generated projects found in {target}")
    sys.exit(0 if all(r["tests_passed"] for r in results) else 1)
