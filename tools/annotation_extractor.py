#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import re
import sys

# FHEVM Annotation Extractor
# Finds @dev explanation comments in contract and test sources and pairs each
# one with the code unit that follows it (a braced declaration or one statement).

SENTENCE_SPLIT = re.compile(r"[.!?]\s+")
CONTRACT_NAME = re.compile(r"^\s*contract\s+(\w+)(?:\s+is\s+|\s*\{)", re.MULTILINE)
BLOCK_OPEN = re.compile(r"^\s*/\*\*\s*$")
BLOCK_OPEN_TAG = re.compile(r"^\s*/\*\*\s*@dev\s+(.+)")
BLOCK_FIRST_TAG = re.compile(r"^\s*\*\s*@dev\s+(.+)")
BLOCK_LINE_PREFIX = re.compile(r"^\s*\*?\s*")
COMMENT_PREFIXES = ("//", "/*", "*")
DEV_TAG = re.compile(r"@dev\b")

STYLES = {
    "solidity": {
        "line_tag": re.compile(r"^\s*///\s*@dev\s+(.+)"),
        "line_prefix": "///",
        "line_marker": re.compile(r"///\s*"),
        "line_any_tag": re.compile(r"^\s*///\s*@"),
        "block_comments": True,
        "declaration": re.compile(r"^\s*(function|constructor|modifier|event|struct|enum|mapping|using)\b"),
        "boundary": re.compile(r"^\s*(function|constructor)\b"),
        "fence": "solidity",
    },
    "typescript": {
        "line_tag": re.compile(r"^\s*//\s*@dev\s+(.+)"),
        "line_prefix": "//",
        "line_marker": re.compile(r"//\s*"),
        "line_any_tag": re.compile(r"^\s*//\s*@"),
        "block_comments": False,
        "declaration": re.compile(
            r"^\s*(?:(?:it|describe|before|beforeEach|after|afterEach)(?:\.only|\.skip)?\s*\("
            r"|(?:export\s+)?(?:async\s+)?function\b)"
        ),
        "boundary": re.compile(r"^\s*(it|describe|function)\b"),
        "fence": "typescript",
    },
}


def get_style(style):
    if style not in STYLES:
        raise ValueError(f"Unknown comment style '{style}'. Expected one of: {', '.join(STYLES)}")
    return STYLES[style]


def style_for_path(path):
    return "solidity" if os.path.splitext(path)[1] == ".sol" else "typescript"


def truncate_explanation(explanation):
    """Keep at most the first two sentences."""
    sentences = [s for s in SENTENCE_SPLIT.split(explanation) if s.strip()]
    if len(sentences) <= 2:
        return explanation
    return ". ".join(sentences[:2]) + "."


def _read_line_comment(lines, i, conv):
    m = conv["line_tag"].match(lines[i])
    if not m: return None
    parts = [m.group(1).strip()]
    last = i
    j = i + 1
    while j < len(lines) and lines[j].strip().startswith(conv["line_prefix"]) and not conv["line_any_tag"].match(lines[j]):
        text = conv["line_marker"].sub("", lines[j], count=1).strip()
        if text: parts.append(text)
        last = j
        j += 1
    return " ".join(parts), last


def _read_block_comment(lines, i):
    m = BLOCK_OPEN_TAG.match(lines[i])
    start = i
    if not m and BLOCK_OPEN.match(lines[i]) and i + 1 < len(lines):
        m = BLOCK_FIRST_TAG.match(lines[i + 1])
        start = i + 1
    if not m: return None

    first = m.group(1)
    if "*/" in first:
        return first.split("*/", 1)[0].strip(), start
    parts = [first.strip()]
    for j in range(start + 1, len(lines)):
        closing = "*/" in lines[j]
        raw = lines[j].split("*/", 1)[0] if closing else lines[j]
        text = BLOCK_LINE_PREFIX.sub("", raw, count=1).strip()
        # Other tags inside the same block belong to other NatSpec fields.
        if text and not text.startswith("@"):
            parts.append(text)
        if closing:
            return " ".join(parts).strip(), j
    return " ".join(parts).strip(), len(lines) - 1


def _is_comment_or_blank(line):
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIXES)


def _block_end(lines, start):
    # Departure: the unit may close on its own first line (one-line bodies) or
    # at the first ";" of a bodiless declaration, instead of requiring depth to
    # return to zero on a later line.
    depth = 0
    opened = False
    for j in range(start, len(lines)):
        depth += lines[j].count("{") - lines[j].count("}")
        if "{" in lines[j]: opened = True
        if opened and depth <= 0:
            return j
        # Bodiless declarations (events, interface functions) end at their terminator.
        if not opened and ";" in lines[j]:
            return j
    # Unbalanced braces: the unit runs to the last scanned line.
    return len(lines) - 1


def _statement_end(lines, start, conv):
    # A following tag or declaration is checked before the ";"/"}" terminator,
    # so a one-line declaration after an unterminated statement is never swallowed.
    for j in range(start, len(lines)):
        if j > start and (DEV_TAG.search(lines[j]) or conv["boundary"].match(lines[j])):
            return j - 1
        if ";" in lines[j] or "}" in lines[j]:
            return j
    return len(lines) - 1


def _code_unit(lines, start, conv):
    code_start = start
    while code_start < len(lines) and _is_comment_or_blank(lines[code_start]):
        code_start += 1
    if code_start >= len(lines): return None
    if conv["declaration"].match(lines[code_start]):
        code_end = _block_end(lines, code_start)
    else:
        code_end = _statement_end(lines, code_start, conv)
    return code_start, code_end, "\n".join(lines[code_start:code_end + 1]).strip()


def extract_annotations(source_text, style):
    """Return the ordered @dev annotation blocks of one source text.

    Each block is a dict with ``explanation``, ``code_text`` and the 1-based
    inclusive ``start_line``/``end_line`` of the code. Texts without tags yield
    an empty list; unbalanced braces never raise.
    """
    conv = get_style(style)
    lines = source_text.split("\n")
    blocks = []
    i = 0
    while i < len(lines):
        comment = _read_line_comment(lines, i, conv)
        if comment is None and conv["block_comments"]:
            comment = _read_block_comment(lines, i)
        if comment is None:
            i += 1
            continue

        explanation, last = comment
        # Preserved quirk: scanning resumes right after the comment, not after
        # the code unit, so tags nested inside a documented body are reported too.
        i = last + 1
        if not explanation: continue

        unit = _code_unit(lines, last + 1, conv)
        if unit is None: continue
        code_start, code_end, code_text = unit
        if not code_text: continue
        blocks.append({
            "explanation": truncate_explanation(explanation),
            "code_text": code_text,
            "start_line": code_start + 1,
            "end_line": code_end + 1,
        })
    return blocks


def get_contract_name(source_text):
    m = CONTRACT_NAME.search(source_text)
    return m.group(1) if m else None


def _clean_block_text(text):
    text = re.sub(r"\n\s*\*\s?", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def extract_header(source_text):
    """Read @title and @notice/@description from the leading NatSpec comments."""
    header = {"title": "", "summary": "", "notice": ""}

    m = re.search(r"///\s*@title\s+(.+?)\s*(?:\n|$)", source_text) or \
        re.search(r"/\*\*(?:(?!\*/).)*?@title\s+(.+?)\s*(?:\n|\*/)", source_text, re.DOTALL)
    if m:
        title_line = m.group(1).strip()
        parts = re.split(r"\s+-\s+", title_line, maxsplit=1)
        header["title"] = parts[0].strip()
        header["summary"] = parts[1].strip() if len(parts) > 1 else title_line

    lines = source_text.split("\n")
    for i, line in enumerate(lines):
        m = re.search(r"///\s*@notice\s+(.+)", line)
        if not m: continue
        parts = [m.group(1).strip()]
        for follow in lines[i + 1:]:
            if not follow.strip().startswith("///") or re.search(r"///\s*@", follow): break
            text = re.sub(r"///\s*", "", follow, count=1).strip()
            if text: parts.append(text)
        header["notice"] = " ".join(parts)
        break

    if not header["notice"]:
        for tag in ("notice", "description"):
            m = re.search(r"/\*\*(?:(?!\*/).)*?@" + tag + r"\s+(.+?)(?=\n\s*\*\s*@|\*/)", source_text, re.DOTALL)
            if m:
                header["notice"] = _clean_block_text(m.group(1))
                break
    return header


def main():
    if len(sys.argv) < 2:
        print("Usage: annotation_extractor.py <source_file> [solidity|typescript]")
        return 1
    path = sys.argv[1]
    style = sys.argv[2] if len(sys.argv) > 2 else style_for_path(path)
    with open(path, "r", encoding="utf-8") as f:
        blocks = extract_annotations(f.read(), style)
    for n, block in enumerate(blocks, start=1):
        print(f"{n}. [{block['start_line']}-{block['end_line']}] {block['explanation']}")
    if not blocks:
        print("  No @dev annotations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
