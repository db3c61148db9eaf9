#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import sys
from pathlib import Path

import annotation_extractor
import config_store
import example_registry
import workspace_config

# FHEVM Example Discovery
# Finds contract/test pairs in the workspace that the categories config does not list yet.


def find_test_file(root, contract_rel, category):
    """contracts/a/b/X.sol -> test/a/b/X.ts, falling back to test/<category>/X.ts"""
    root = Path(root)
    relative = Path(contract_rel).relative_to(workspace_config.CONTRACTS_DIR)
    candidates = [
        Path(workspace_config.TEST_DIR) / relative.with_suffix(".ts"),
        Path(workspace_config.TEST_DIR) / category / f"{relative.stem}.ts",
    ]
    for candidate in candidates:
        if (root / candidate).exists():
            return candidate.as_posix()
    return None


def discover_examples(root, table=None):
    """Every contract under contracts/<category>/ that declares a contract and has a test."""
    root = Path(root)
    contracts_dir = root / workspace_config.CONTRACTS_DIR
    discovered = []
    if not contracts_dir.exists(): return discovered

    for dirpath, dirnames, filenames in os.walk(contracts_dir):
        dirnames.sort()
        for filename in sorted(filenames):
            if not filename.endswith(".sol"): continue
            full = Path(dirpath) / filename
            parts = full.relative_to(contracts_dir).parts
            # Files directly under contracts/ have no category folder.
            if len(parts) < 2: continue
            category = parts[0]
            contract_rel = full.relative_to(root).as_posix()

            name = annotation_extractor.get_contract_name(full.read_text(encoding="utf-8", errors="ignore"))
            if not name: continue
            test_rel = find_test_file(root, contract_rel, category)
            if not test_rel: continue
            discovered.append({
                "key": example_registry.example_key(contract_rel),
                "category": category,
                "contract_name": name,
                "item": {"path": contract_rel, "test": test_rel},
            })
    return discovered


def find_new_examples(root, table):
    registered = {item["path"] for _, _, item in example_registry.iter_examples(table)}
    return [e for e in discover_examples(root, table) if e["item"]["path"] not in registered]


def register_examples(config_path, examples):
    """Fold discovered examples into the config file; returns the merged table."""
    new_items = [{"category": e["category"], "item": e["item"]} for e in examples]
    return config_store.update_config(config_path, new_items)


def main():
    root = workspace_config.PROJECT_ROOT
    config_file = workspace_config.config_path(root)
    try:
        table = config_store.load_config(config_file)
    except (config_store.ConfigFormatError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1
    new = find_new_examples(root, table)
    if not new:
        print("✅ No new examples found. All examples are already registered.")
        return 0
    for e in new:
        print(f"  + [{e['category']}] {e['key']} ({e['item']['path']})")
    if "--write" in sys.argv:
        try:
            register_examples(config_file, new)
        except config_store.ConfigFormatError as e:
            print(f"Error: {e}")
            return 1
        print(f"✅ Registered {len(new)} example(s) in {config_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
