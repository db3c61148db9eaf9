#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import re
import posixpath

import annotation_extractor

# FHEVM Docs Composer
# Builds the GitBook page for one example and keeps SUMMARY.md cross-references unique.

SOURCE_ROOT = "contracts"
DOCS_ROOT = "docs"
HEADING_PATTERN = re.compile(r"^#{1,6}\s")
LINK_PATTERN = re.compile(r"^\s*[-*]\s+\[")


def _to_posix(path):
    return path.replace("\\", "/")


def _strip_root(path, root):
    path = _to_posix(path)
    prefix = root.rstrip("/") + "/"
    return path[len(prefix):] if path.startswith(prefix) else path


def to_kebab(name):
    """FHEAdd -> fhe-add, ERC7984Example -> erc7984-example"""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name).lower()


def derive_output_path(source_path, source_root=SOURCE_ROOT, docs_root=DOCS_ROOT):
    """contracts/fundamentals/fhe-operations/FHEAdd.sol -> docs/fundamentals/fhe-operations/fhe-add.md"""
    relative = _strip_root(source_path, source_root)
    dirname, filename = posixpath.split(relative)
    stem = posixpath.splitext(filename)[0]
    if dirname in ("", "."):
        return f"{docs_root}/{to_kebab(stem)}.md"
    return f"{docs_root}/{dirname}/{to_kebab(stem)}.md"


def derive_category(source_path, source_root=SOURCE_ROOT):
    """contracts/fundamentals/fhe-operations/FHEAdd.sol -> 'Fundamentals - Fhe Operations'"""
    dirname = posixpath.dirname(_strip_root(source_path, source_root))
    if dirname in ("", "."):
        return "Fundamentals"
    segments = []
    for segment in dirname.split("/"):
        words = [w for w in re.split(r"[-_]", segment) if w]
        segments.append(" ".join(w[:1].upper() + w[1:].lower() for w in words))
    return " - ".join(segments)


def compose_document(meta, source_text, test_text):
    """Assemble one example page from its sources. Pure: no filesystem access.

    ``meta`` carries ``key``, ``source_path`` and ``test_path`` and may carry
    ``title``, ``description``, ``category`` and ``output``.
    """
    header = annotation_extractor.extract_header(source_text)
    source_path = meta["source_path"]
    test_path = meta["test_path"]
    return {
        "title": meta.get("title") or header["title"] or meta["key"],
        "description": meta.get("description") or header["notice"] or header["summary"] or "",
        "category": meta.get("category") or derive_category(source_path),
        "source_path": source_path,
        "test_path": test_path,
        "contract_name": annotation_extractor.get_contract_name(source_text) or "Contract",
        "source_listing": source_text,
        "test_listing": test_text,
        "annotation_blocks": annotation_extractor.extract_annotations(
            source_text, annotation_extractor.style_for_path(source_path)),
        "annotation_blocks_test": annotation_extractor.extract_annotations(
            test_text, annotation_extractor.style_for_path(test_path)),
        "output_path": meta.get("output") or derive_output_path(source_path),
    }


def _placement_line(kind, directory, default):
    target = directory if directory not in (default, ".", "") else default
    return f"- `.{kind}` file → `<your-project-root-dir>/{target}/`\n"


def _fence(language, code):
    return f"```{language}\n{code}\n```\n\n"


def _annotation_tab(title, blocks, language):
    out = f'{{% tab title="{title}" %}}\n\n'
    for n, block in enumerate(blocks, start=1):
        out += f"### {n}. {block['explanation']}\n\n"
        out += _fence(language, block["code_text"])
    return out + "{% endtab %}\n\n"


def render_document(doc):
    source_tab = f"{doc['contract_name']}.sol"
    test_tab = posixpath.basename(_to_posix(doc["test_path"]))

    md = f"# {doc['title']}\n\n" if doc["title"] else ""
    md += f"{doc['description']}\n\n"

    md += '{% hint style="info" %}\n'
    md += "To run this example correctly, make sure the files are placed in the following directories:\n\n"
    md += _placement_line("sol", posixpath.dirname(_to_posix(doc["source_path"])), "contracts")
    md += _placement_line("ts", posixpath.dirname(_to_posix(doc["test_path"])), "test")
    md += "\nThis ensures Hardhat can compile and test your contracts as expected.\n"
    md += "{% endhint %}\n\n"

    md += "{% tabs %}\n\n"
    md += f'{{% tab title="{source_tab}" %}}\n\n' + _fence("solidity", doc["source_listing"]) + "{% endtab %}\n\n"
    md += f'{{% tab title="{test_tab}" %}}\n\n' + _fence("typescript", doc["test_listing"]) + "{% endtab %}\n\n"
    md += "{% endtabs %}\n\n"

    if doc["annotation_blocks"] or doc["annotation_blocks_test"]:
        md += "## Implementation Details\n\n"
        md += "{% tabs %}\n\n"
        if doc["annotation_blocks"]:
            md += _annotation_tab(source_tab, doc["annotation_blocks"], "solidity")
        if doc["annotation_blocks_test"]:
            md += _annotation_tab(test_tab, doc["annotation_blocks_test"], "typescript")
        md += "{% endtabs %}\n\n"
    return md


def index_entry(doc, docs_root=DOCS_ROOT):
    target = _strip_root(doc["output_path"], docs_root)
    return {"link_text": doc["title"], "target_file": target, "category_heading": doc["category"]}


def update_index(index_text, entry):
    """Add one link under its category heading; a target mentioned anywhere is a no-op."""
    target = entry["target_file"]
    if target in index_text:
        return index_text

    link = f"- [{entry['link_text']}]({target})"
    heading = f"## {entry['category_heading']}"
    if not index_text.strip():
        return f"{heading}\n\n{link}\n"
    lines = index_text.split("\n")
    if heading not in (line.strip() for line in lines):
        return index_text.rstrip("\n") + f"\n\n{heading}\n\n{link}\n"

    start = next(n for n, line in enumerate(lines) if line.strip() == heading)
    end = len(lines)
    for n in range(start + 1, len(lines)):
        if HEADING_PATTERN.match(lines[n]):
            end = n
            break
    links = [n for n in range(start + 1, end) if LINK_PATTERN.match(lines[n])]
    if links:
        lines.insert(links[-1] + 1, link)
        return "\n".join(lines)

    # Heading without links yet: the link goes after the heading's blank line.
    at = start + 1
    new = ["", link]
    if at < len(lines) and not lines[at].strip():
        at += 1
        new = [link]
    if at < len(lines) and HEADING_PATTERN.match(lines[at]):
        new.append("")
    lines[at:at] = new
    return "\n".join(lines)
