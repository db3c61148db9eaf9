#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import sys

import config_store
import docs_composer
import example_registry
import workspace_config

# FHEVM Example Docs Generator
# Writes one GitBook page per registered example and links it from docs/SUMMARY.md.

SUMMARY_HEADER = "# Summary\n"


def _meta(example):
    item = example["item"]
    return {
        "key": example["key"],
        "source_path": item["path"],
        "test_path": item["test"],
        "output": docs_composer.derive_output_path(item["path"], workspace_config.CONTRACTS_DIR, workspace_config.DOCS_DIR),
    }


def read_summary(root):
    path = workspace_config.summary_path(root)
    return workspace_config.read_text(path) if os.path.exists(path) else SUMMARY_HEADER


def write_summary(root, text):
    workspace_config.write_text(workspace_config.summary_path(root), text)


def build_document(root, example):
    meta = _meta(example)
    source_text = workspace_config.read_text(os.path.join(root, meta["source_path"]))
    test_text = workspace_config.read_text(os.path.join(root, meta["test_path"]))
    return docs_composer.compose_document(meta, source_text, test_text)


def generate_docs(root, example, update_summary=True):
    """Render one example page; returns the document and its index entry."""
    doc = build_document(root, example)
    workspace_config.write_text(os.path.join(root, doc["output_path"]), docs_composer.render_document(doc))
    entry = docs_composer.index_entry(doc, workspace_config.DOCS_DIR)
    if update_summary:
        write_summary(root, docs_composer.update_index(read_summary(root), entry))
    print(f"  ✅ {example['key']} -> {doc['output_path']}")
    return doc, entry


def _generate_batch(root, examples):
    summary = read_summary(root)
    generated = 0; failed = []
    for example in examples:
        try:
            _, entry = generate_docs(root, example, update_summary=False)
        except (OSError, ValueError) as e:
            print(f"  ❌ {example['key']}: {e}")
            failed.append(example["key"])
            continue
        summary = docs_composer.update_index(summary, entry)
        generated += 1
    if generated: write_summary(root, summary)
    return {"generated": generated, "failed": failed}


def _all_examples(table):
    return [{"key": k, "category": c, "item": i, "record": table[c]} for k, c, i in example_registry.iter_examples(table)]


def generate_all_docs(root, table):
    print(f"📖 Generating documentation for {sum(len(r['items']) for r in table.values())} examples")
    return _generate_batch(root, _all_examples(table))


def generate_missing_docs(root, table):
    missing = [e for e in _all_examples(table) if not os.path.exists(os.path.join(root, _meta(e)["output"]))]
    if not missing:
        print("  i All examples already have documentation.")
        return {"generated": 0, "failed": []}
    print(f"📖 Generating documentation for {len(missing)} undocumented examples")
    return _generate_batch(root, missing)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: doc_generator.py <example-key|--all|--missing>")
        sys.exit(1)
    root = workspace_config.PROJECT_ROOT
    try:
        table = config_store.load_config(workspace_config.config_path(root))
    except (config_store.ConfigFormatError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    if sys.argv[1] == "--all":
        result = generate_all_docs(root, table)
    elif sys.argv[1] == "--missing":
        result = generate_missing_docs(root, table)
    else:
        example = example_registry.find_example(table, sys.argv[1])
        if example is None:
            print(f"Error: Unknown example '{sys.argv[1]}'")
            sys.exit(1)
        generate_docs(root, example)
        result = {"failed": []}
    sys.exit(1 if result["failed"] else 0)
