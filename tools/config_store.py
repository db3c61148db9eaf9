#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import re
import sys
import argparse

# FHEVM Categories Config Store
# Round-trips the exported CATEGORIES object literal in categories-config.ts.
# The file is always rewritten as a whole: parse -> merge -> serialize.

EXPORT_PATTERN = re.compile(r"export\s+const\s+([A-Za-z_$][\w$]*)\s*(?::\s*[^=]+?)?\s*=\s*(\{.*?\n\};)(?=[ \t]*(?:\r?\n|$))", re.DOTALL)
PROPERTY_KEY_PATTERN = re.compile(r"[A-Za-z_$][\w$]*")
NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
KEY_LINE_PATTERN = re.compile(r"""^\s*((['"])([^'"]+)\2|([A-Za-z_][A-Za-z0-9_-]*))\s*:\s*\{""")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

CATEGORY_FIELDS = ("name", "description", "items", "additionalDeps")
ITEM_FIELDS = ("path", "test", "fixture", "additionalFiles")

CONFIG_HEADER = """/**
 * Categories configuration for examples
 * Auto-generated - do not edit manually
 */

export interface ContractItem {
  path: string;
  test: string;
  fixture?: string;
  additionalFiles?: string[];
}

export interface CategoryConfig {
  name: string;
  description: string;
  items: ContractItem[];
  additionalDeps?: Record<string, string>;
}
"""


class ConfigFormatError(ValueError):
    """Raised when a config source cannot be loaded as a plain category table."""


def normalize_key(key):
    key = key.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in ("'", '"'):
        key = key[1:-1]
    return key


class _LiteralParser:
    """Recursive-descent reader for object/array/string/number literals only."""

    def __init__(self, text, line_offset=0):
        self.text = text
        self.pos = 0
        self.line_offset = line_offset

    def fail(self, message):
        line = self.text.count("\n", 0, self.pos) + 1 + self.line_offset
        col = self.pos - (self.text.rfind("\n", 0, self.pos) + 1) + 1
        raise ConfigFormatError(f"Unsafe or malformed literal at line {line}, column {col}: {message}")

    def peek(self):
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_space(self):
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c in " \t\r\n":
                self.pos += 1
            elif self.text.startswith("//", self.pos):
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end == -1 else end + 1
            elif self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                if end == -1: self.fail("unterminated comment")
                self.pos = end + 2
            else:
                break

    def parse(self):
        self.skip_space()
        value = self.value()
        self.skip_space()
        if self.pos != len(self.text):
            self.fail(f"unexpected trailing text {self.text[self.pos:self.pos + 20]!r}")
        return value

    def value(self):
        c = self.peek()
        if c == "{": return self.obj()
        if c == "[": return self.array()
        if c in ("'", '"'): return self.string()
        if c == "-" or c.isdigit(): return self.number()
        for word, result in (("true", True), ("false", False), ("null", None)):
            if self.text.startswith(word, self.pos) and not self._ident_char(self.pos + len(word)):
                self.pos += len(word)
                return result
        if c == "`": self.fail("template literals are not allowed")
        if c == "": self.fail("unexpected end of literal")
        self.fail(f"expression {self.text[self.pos:self.pos + 20]!r} is not a plain literal")

    def _ident_char(self, index):
        return index < len(self.text) and (self.text[index].isalnum() or self.text[index] in "_$")

    def obj(self):
        self.pos += 1
        result = {}
        while True:
            self.skip_space()
            if self.peek() == "}":
                self.pos += 1
                return result
            if self.text.startswith("...", self.pos): self.fail("spread syntax is not allowed")
            key_start = self.pos
            key = self.key()
            self.skip_space()
            if self.peek() != ":":
                self.fail(f"expected ':' after key {key!r}")
            self.pos += 1
            self.skip_space()
            if key in result:
                self.pos = key_start
                self.fail(f"duplicate key {key!r}")
            result[key] = self.value()
            self.skip_space()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "}":
                self.fail("expected ',' or '}'")

    def key(self):
        c = self.peek()
        if c in ("'", '"'): return self.string()
        m = PROPERTY_KEY_PATTERN.match(self.text, self.pos)
        if not m: self.fail("expected a property key")
        self.pos = m.end()
        return m.group(0)

    def array(self):
        self.pos += 1
        result = []
        while True:
            self.skip_space()
            if self.peek() == "]":
                self.pos += 1
                return result
            result.append(self.value())
            self.skip_space()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "]":
                self.fail("expected ',' or ']'")

    def string(self):
        delim = self.text[self.pos]
        self.pos += 1
        out = []
        escapes = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
        while True:
            if self.pos >= len(self.text): self.fail("unterminated string")
            c = self.text[self.pos]
            if c == delim:
                self.pos += 1
                return "".join(out)
            if c == "\n": self.fail("newline in string")
            if c == "\\":
                self.pos += 1
                esc = self.peek()
                if esc == "": self.fail("unterminated string")
                if esc == "u":
                    digits = self.text[self.pos + 1:self.pos + 5]
                    if not re.fullmatch(r"[0-9a-fA-F]{4}", digits): self.fail("bad unicode escape")
                    out.append(chr(int(digits, 16)))
                    self.pos += 5
                    continue
                if esc == "\n":
                    self.pos += 1
                    continue
                out.append(escapes.get(esc, esc))
                self.pos += 1
                continue
            out.append(c)
            self.pos += 1

    def number(self):
        m = NUMBER_PATTERN.match(self.text, self.pos)
        if not m: self.fail("malformed number")
        self.pos = m.end()
        raw = m.group(0)
        return float(raw) if any(c in raw for c in ".eE") else int(raw)


def _check_string(value, where):
    if not isinstance(value, str):
        raise ConfigFormatError(f"{where} must be a string")


def _check_table(data):
    if not isinstance(data, dict):
        raise ConfigFormatError("Exported literal is not an object")
    for key, record in data.items():
        where = f"Category '{key}'"
        if not isinstance(record, dict):
            raise ConfigFormatError(f"{where} is not an object")
        unknown = [f for f in record if f not in CATEGORY_FIELDS]
        if unknown:
            raise ConfigFormatError(f"{where} has unknown field(s): {', '.join(unknown)}")
        for field in ("name", "description", "items"):
            if field not in record:
                raise ConfigFormatError(f"{where} is missing '{field}'")
        _check_string(record["name"], f"{where} name")
        _check_string(record["description"], f"{where} description")
        if not isinstance(record["items"], list):
            raise ConfigFormatError(f"{where} items must be an array")
        deps = record.get("additionalDeps")
        if deps is not None:
            if not isinstance(deps, dict):
                raise ConfigFormatError(f"{where} additionalDeps must be an object")
            for pkg, version in deps.items(): _check_string(version, f"{where} dependency '{pkg}'")
        for index, item in enumerate(record["items"]):
            item_where = f"{where} item {index + 1}"
            if not isinstance(item, dict):
                raise ConfigFormatError(f"{item_where} is not an object")
            unknown = [f for f in item if f not in ITEM_FIELDS]
            if unknown:
                raise ConfigFormatError(f"{item_where} has unknown field(s): {', '.join(unknown)}")
            for field in ("path", "test"):
                if field not in item:
                    raise ConfigFormatError(f"{item_where} is missing '{field}'")
                _check_string(item[field], f"{item_where} {field}")
            if "fixture" in item: _check_string(item["fixture"], f"{item_where} fixture")
            if "additionalFiles" in item:
                files = item["additionalFiles"]
                if not isinstance(files, list):
                    raise ConfigFormatError(f"{item_where} additionalFiles must be an array")
                for f in files: _check_string(f, f"{item_where} additional file")
    return data


def parse_config(source_text):
    match = EXPORT_PATTERN.search(source_text)
    if not match:
        raise ConfigFormatError("Could not find an exported object literal (expected 'export const NAME: Type = { ... };')")
    literal = match.group(2)[:-1]
    line_offset = source_text.count("\n", 0, match.start(2))
    return _check_table(_LiteralParser(literal, line_offset).parse())


def validate_config(source_text):
    """Text-only duplicate/hyphen scan; never evaluates the literal."""
    keys = []
    for number, line in enumerate(source_text.split("\n"), start=1):
        m = KEY_LINE_PATTERN.match(line)
        if not m: continue
        normalized = normalize_key(m.group(3) or m.group(4))
        # Record fields that open an object (additionalDeps) are not category keys.
        if normalized in CATEGORY_FIELDS or normalized in ITEM_FIELDS: continue
        keys.append((normalized, number, line.strip(), bool(m.group(2))))

    occurrences = {}
    for normalized, number, raw, _ in keys:
        occurrences.setdefault(normalized, []).append((number, raw))

    errors = []
    for normalized, hits in occurrences.items():
        if len(hits) > 1:
            locations = ", ".join(f"line {n}: {raw}" for n, raw in hits)
            errors.append(f'Duplicate category key "{normalized}" found at: {locations}')

    warnings = []
    for normalized, number, raw, quoted in keys:
        if "-" in normalized and not quoted:
            warnings.append(
                f'Unquoted key with hyphen at line {number}: "{raw}". '
                f"Keys with hyphens should be quoted. Use '{normalized}' instead of {normalized}"
            )
    return {"valid": not errors, "errors": errors, "warnings": warnings}


def default_category_name(key):
    return " ".join(word[:1].upper() + word[1:] for word in key.split("-") if word)


def _dedupe(items, seen=None):
    seen = set() if seen is None else seen
    kept = []
    for item in items:
        if item["path"] in seen: continue
        seen.add(item["path"])
        kept.append(dict(item))
    return kept


def merge_items(table, new_items):
    merged = {key: dict(record, items=[dict(i) for i in record["items"]]) for key, record in table.items()}
    by_normalized = {normalize_key(k): k for k in merged}

    groups = {}
    for entry in new_items:
        groups.setdefault(normalize_key(entry["category"]), []).append(entry)

    for normalized, entries in groups.items():
        items = [e["item"] for e in entries]
        existing_key = by_normalized.get(normalized)
        if existing_key is not None:
            record = merged[existing_key]
            record["items"] = record["items"] + _dedupe(items, {i["path"] for i in record["items"]})
            continue
        first = entries[0]
        name = first.get("name") or default_category_name(normalized)
        merged[normalized] = {
            "name": name,
            "description": first.get("description") or f"Examples for {name}",
            "items": _dedupe(items),
        }
        by_normalized[normalized] = normalized
    return merged


def format_key(key):
    return key if IDENTIFIER_PATTERN.match(key) else f"'{quote(key)}'"


def quote(value):
    return value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")


def serialize_config(table, export_name="CATEGORIES"):
    lines = [CONFIG_HEADER, f"export const {export_name}: Record<string, CategoryConfig> = {{"]
    for key, record in table.items():
        lines.append(f"  {format_key(key)}: {{")
        lines.append(f"    name: '{quote(record['name'])}',")
        lines.append(f"    description: '{quote(record['description'])}',")
        lines.append("    items: [")
        for item in record["items"]:
            lines.append("      {")
            lines.append(f"        path: '{quote(item['path'])}',")
            lines.append(f"        test: '{quote(item['test'])}',")
            if "fixture" in item:
                lines.append(f"        fixture: '{quote(item['fixture'])}',")
            if "additionalFiles" in item:
                files = ", ".join(f"'{quote(f)}'" for f in item["additionalFiles"])
                lines.append(f"        additionalFiles: [{files}],")
            lines.append("      },")
        lines.append("    ],")
        if "additionalDeps" in record:
            lines.append("    additionalDeps: {")
            for pkg, version in record["additionalDeps"].items():
                lines.append(f"      {format_key(pkg)}: '{quote(version)}',")
            lines.append("    },")
        lines.append("  },")
    lines.append("};")
    lines.append("")
    return "\n".join(lines)


def load_config(config_path):
    with open(config_path, "r", encoding="utf-8") as f:
        return parse_config(f.read())


def update_config(config_path, new_items):
    """Validate, merge and rewrite the whole config file; nothing is written on failure."""
    with open(config_path, "r", encoding="utf-8") as f:
        content = f.read()
    result = validate_config(content)
    if not result["valid"]:
        raise ConfigFormatError("; ".join(result["errors"]))
    table = merge_items(parse_config(content), new_items)
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(serialize_config(table))
    return table


def report_validation(result, config_path):
    for warning in result["warnings"]:
        print(f"  ⚠️  {warning}")
    for error in result["errors"]:
        print(f"  ❌ {error}")
    if not result["valid"]:
        print(f"Please fix the errors in {config_path} before continuing.")


def main():
    parser = argparse.ArgumentParser(description="FHEVM Categories Config Checker")
    parser.add_argument("path", help="Path to categories-config.ts")
    args = parser.parse_args()

    if not os.path.exists(args.path):
        print(f"Error: Config not found: {args.path}")
        return 1
    with open(args.path, "r", encoding="utf-8") as f:
        content = f.read()

    result = validate_config(content)
    report_validation(result, args.path)
    if not result["valid"]:
        return 1
    try:
        table = parse_config(content)
    except ConfigFormatError as e:
        print(f"  ❌ {e}")
        return 1
    total = sum(len(r["items"]) for r in table.values())
    print(f"✅ {len(table)} categories, {total} examples.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
