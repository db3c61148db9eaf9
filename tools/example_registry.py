#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import posixpath

import config_store
from docs_composer import to_kebab

# FHEVM Example Registry
# Read-only views over the category table: an example is one contract item,
# addressed by the kebab-case of its contract file name.


def example_key(contract_path):
    stem = posixpath.splitext(posixpath.basename(contract_path.replace("\\", "/")))[0]
    return to_kebab(stem)


def iter_examples(table):
    for category, record in table.items():
        for item in record["items"]:
            yield example_key(item["path"]), category, item


def find_example(table, key):
    """Return {"key", "category", "item", "record"} for one example, or None."""
    for found, category, item in iter_examples(table):
        if found == key:
            return {"key": found, "category": category, "item": item, "record": table[category]}
    return None


def find_category(table, key):
    wanted = config_store.normalize_key(key)
    for category, record in table.items():
        if config_store.normalize_key(category) == wanted:
            return category, record
    return None


def examples_by_category(table):
    grouped = {}
    for key, category, item in iter_examples(table):
        grouped.setdefault(category, []).append({"key": key, "item": item})
    return grouped
