#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import re
import shutil
import sys
from pathlib import Path

import annotation_extractor
import config_store
import example_registry
import workspace_config

# FHEVM Example Scaffolder
# Turns one example, or a whole category, into a standalone Hardhat project
# built from the base template.

TEMPLATE_EXCLUDES = ("node_modules", "artifacts", "cache", "coverage", "types", "dist")
HOMEPAGE = "https://github.com/zama-ai/fhevm-examples"

# Import prefix -> (npm package, version). Longest prefix wins.
KNOWN_DEPENDENCIES = {
    "@openzeppelin/confidential-contracts": ("@openzeppelin/confidential-contracts", "^0.3.0"),
    "@openzeppelin/contracts": ("@openzeppelin/contracts", "^5.4.0"),
}

IMPORT_PATTERN = re.compile(r"""^\s*import\s+(?:[^'"]*\s+from\s+)?["']([^"']+)["']""", re.MULTILINE)
PRAGMA_PATTERN = re.compile(r"pragma\s+solidity\s+\^?(0\.8\.\d+)")
COMPILER_VERSION_PATTERN = re.compile(r'version:\s*"0\.8\.\d+"')
TASK_IMPORT_PATTERN = re.compile(r"""import\s+["'].*/tasks/.*["'];\s*\n""")
TSCONFIG_TASKS_PATTERN = re.compile(r"""["']tasks/\*\*/\*["']\s*,?\s*""")


class ScaffoldError(Exception):
    pass


def detect_dependencies(contract_text):
    found = {}
    for module in IMPORT_PATTERN.findall(contract_text):
        for prefix in sorted(KNOWN_DEPENDENCIES, key=len, reverse=True):
            if module.startswith(prefix + "/") or module == prefix:
                package, version = KNOWN_DEPENDENCIES[prefix]
                found[package] = version
                break
    return found


def _contract_name(contract_file):
    name = annotation_extractor.get_contract_name(contract_file.read_text(encoding="utf-8"))
    if not name:
        raise ScaffoldError(f"Could not extract contract name from {contract_file}")
    return name


def _require(path, label):
    if not path.exists():
        raise ScaffoldError(f"{label} not found: {path}")
    return path


def prepare_output(template_dir, output_dir, override=False):
    template_dir = Path(template_dir); output_dir = Path(output_dir)
    _require(template_dir, "Template")
    if output_dir.exists():
        if not override:
            raise ScaffoldError(f"Output directory already exists: {output_dir} (use --override)")
        shutil.rmtree(output_dir)
    shutil.copytree(template_dir, output_dir, ignore=shutil.ignore_patterns(*TEMPLATE_EXCLUDES))

    tasks_dir = output_dir / "tasks"
    if tasks_dir.exists(): shutil.rmtree(tasks_dir)
    hardhat_config = output_dir / "hardhat.config.ts"
    if hardhat_config.exists():
        hardhat_config.write_text(TASK_IMPORT_PATTERN.sub("", hardhat_config.read_text(encoding="utf-8")), encoding="utf-8")
    tsconfig = output_dir / "tsconfig.json"
    if tsconfig.exists():
        tsconfig.write_text(TSCONFIG_TASKS_PATTERN.sub("", tsconfig.read_text(encoding="utf-8")), encoding="utf-8")

    for folder, suffix in (("contracts", ".sol"), ("test", ".ts")):
        target = output_dir / folder
        target.mkdir(parents=True, exist_ok=True)
        for stale in target.glob(f"*{suffix}"):
            stale.unlink()
    return output_dir


def copy_item(root, item, output_dir, copied_tests=None):
    """Copy one example's contract, test, fixture and additional files; returns the contract name."""
    root = Path(root); output_dir = Path(output_dir)
    contract_file = _require(root / item["path"], "Contract")
    test_file = _require(root / item["test"], "Test")
    name = _contract_name(contract_file)

    shutil.copy2(contract_file, output_dir / "contracts" / f"{name}.sol")
    print(f"  + {name}.sol")
    # copied_tests maps destination file name -> source test path.
    if copied_tests is None:
        copied_tests = {}
    owner = copied_tests.get(test_file.name)
    if owner is None:
        shutil.copy2(test_file, output_dir / "test" / test_file.name)
        copied_tests[test_file.name] = item["test"]
        print(f"  + {test_file.name}")
    elif owner != item["test"]:
        raise ScaffoldError(f"Test file name collision: {item['test']} and {owner} both map to test/{test_file.name}")

    extras = ([item["fixture"]] if item.get("fixture") else []) + list(item.get("additionalFiles", []))
    for extra in extras:
        source = root / extra
        if not source.exists():
            print(f"  ⚠️  Missing support file, skipping: {extra}")
            continue
        folder = "contracts" if source.suffix == ".sol" else "test"
        shutil.copy2(source, output_dir / folder / source.name)
        print(f"  + {source.name}")
    return name


def render_deploy_script(contract_names):
    body = ""
    for name in contract_names:
        body += f"""  const deployed{name} = await deploy("{name}", {{
    from: deployer,
    log: true,
  }});
  console.log(`{name} contract: `, deployed{name}.address);
"""
    func_id = f"deploy_{contract_names[0].lower()}" if len(contract_names) == 1 else "deploy_all"
    tags = ", ".join(f'"{n}"' for n in contract_names)
    return f"""import {{ DeployFunction }} from "hardhat-deploy/types";
import {{ HardhatRuntimeEnvironment }} from "hardhat/types";

const func: DeployFunction = async function (hre: HardhatRuntimeEnvironment) {{
  const {{ deployer }} = await hre.getNamedAccounts();
  const {{ deploy }} = hre.deployments;

{body}}};
export default func;
func.id = "{func_id}";
func.tags = [{tags}];
"""


def render_readme(title, description, contract_names):
    md = f"# {title}\n\n{description}\n\n"
    if len(contract_names) > 1:
        md += f"## Included Examples\n\nThis project contains {len(contract_names)} example contracts:\n\n"
        md += "".join(f"{n}. **{name}**\n" for n, name in enumerate(contract_names, start=1)) + "\n"
    md += "## Quick Start\n\n"
    md += "### Prerequisites\n\n- **Node.js**: Version 20 or higher\n- **npm**: Package manager\n\n"
    md += "### Installation\n\n"
    md += "1. **Install dependencies**\n\n   ```bash\n   npm install\n   ```\n\n"
    md += "2. **Set up environment variables**\n\n   ```bash\n   npx hardhat vars set MNEMONIC\n   npx hardhat vars set INFURA_API_KEY\n   ```\n\n"
    md += "3. **Compile and test**\n\n   ```bash\n   npm run compile\n   npm run test\n   ```\n\n"
    md += "## Contracts\n\n"
    for name in contract_names:
        md += f"- `{name}` in `contracts/{name}.sol`\n"
    md += "\n## Deployment\n\n```bash\nnpx hardhat node\nnpx hardhat deploy --network localhost\n```\n"
    return md


def patch_package_json(output_dir, name, description, homepage, dependencies):
    package_file = _require(Path(output_dir) / "package.json", "package.json")
    package = json.loads(package_file.read_text(encoding="utf-8"))
    package["name"] = name
    package["description"] = description
    package["homepage"] = homepage
    if dependencies:
        package.setdefault("dependencies", {}).update(dependencies)
    package_file.write_text(json.dumps(package, indent=2) + "\n", encoding="utf-8")
    return package


def align_compiler_version(output_dir, contract_text):
    """Set the hardhat compiler version to the contract's pragma; returns the version or None."""
    hardhat_config = Path(output_dir) / "hardhat.config.ts"
    m = PRAGMA_PATTERN.search(contract_text)
    if not m or not hardhat_config.exists(): return None
    content = hardhat_config.read_text(encoding="utf-8")
    hardhat_config.write_text(COMPILER_VERSION_PATTERN.sub(f'version: "{m.group(1)}"', content, count=1), encoding="utf-8")
    return m.group(1)


def _template_dir(root):
    return Path(root) / workspace_config.TEMPLATE_DIR


def create_example(root, table, key, output_dir, override=False):
    example = example_registry.find_example(table, key)
    if example is None:
        raise ScaffoldError(f"Unknown example '{key}'")
    root = Path(root); item = example["item"]
    print(f"🛠️  Scaffolding example: {key}")

    output_dir = prepare_output(_template_dir(root), output_dir, override)
    name = copy_item(root, item, output_dir)
    contract_text = (root / item["path"]).read_text(encoding="utf-8")
    description = annotation_extractor.extract_header(contract_text)["notice"] or example["record"]["description"]

    (output_dir / "deploy").mkdir(exist_ok=True)
    (output_dir / "deploy" / "deploy.ts").write_text(render_deploy_script([name]), encoding="utf-8")
    patch_package_json(output_dir, f"fhevm-example-{key}", description, f"{HOMEPAGE}/{key}",
                       detect_dependencies(contract_text))
    (output_dir / "README.md").write_text(render_readme(f"FHEVM Example: {key}", description, [name]), encoding="utf-8")
    align_compiler_version(output_dir, contract_text)

    print(f"✅ Example '{key}' created at {output_dir}")
    return output_dir


def create_category(root, table, category, output_dir, override=False):
    found = example_registry.find_category(table, category)
    if found is None:
        raise ScaffoldError(f"Unknown category '{category}'")
    key, record = found
    if not record["items"]:
        raise ScaffoldError(f"Category '{key}' has no examples")
    root = Path(root)
    print(f"🛠️  Scaffolding category: {record['name']} ({len(record['items'])} examples)")

    output_dir = prepare_output(_template_dir(root), output_dir, override)
    copied_tests = {}; names = []; dependencies = {}
    for item in record["items"]:
        names.append(copy_item(root, item, output_dir, copied_tests))
        dependencies.update(detect_dependencies((root / item["path"]).read_text(encoding="utf-8")))
    dependencies.update(record.get("additionalDeps", {}))

    (output_dir / "deploy").mkdir(exist_ok=True)
    (output_dir / "deploy" / "deploy.ts").write_text(render_deploy_script(names), encoding="utf-8")
    patch_package_json(output_dir, f"fhevm-examples-{config_store.normalize_key(key)}", record["description"],
                       f"{HOMEPAGE}/{config_store.normalize_key(key)}", dependencies)
    (output_dir / "README.md").write_text(render_readme(f"FHEVM Examples: {record['name']}", record["description"], names), encoding="utf-8")
    align_compiler_version(output_dir, (root / record["items"][0]["path"]).read_text(encoding="utf-8"))

    print(f"✅ Category '{record['name']}' created at {output_dir}")
    return output_dir


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: example_scaffolder.py <example|category> <key> [output_dir] [--override]")
        sys.exit(1)
    root = workspace_config.PROJECT_ROOT
    kind, key = sys.argv[1], sys.argv[2]
    default_out = f"fhevm-example-{key}" if kind == "example" else f"fhevm-examples-{key}"
    positional = [a for a in sys.argv[3:] if not a.startswith("--")]
    out = positional[0] if positional else str(Path(root) / workspace_config.OUTPUT_DIR / default_out)
    try:
        table = config_store.load_config(workspace_config.config_path(root))
        build = create_example if kind == "example" else create_category
        build(root, table, key, out, "--override" in sys.argv)
    except (ScaffoldError, config_store.ConfigFormatError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)
