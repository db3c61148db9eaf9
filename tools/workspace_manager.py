#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import os
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

import config_store
import doc_generator
import example_discovery
import example_registry
import example_scaffolder
import project_runner
import workspace_config

# FHEVM Examples Manager
# Single entry point for scaffolding, documenting, discovering and validating examples.

FATAL_ERRORS = (config_store.ConfigFormatError, example_scaffolder.ScaffoldError, FileNotFoundError)


def print_banner(console):
    version = "Unknown"
    v_path = Path(__file__).parent.parent / "VERSION"
    if v_path.exists(): version = v_path.read_text().strip()
    banner = Text.assemble(("\n [#] ", "bold blue"), ("FHEVM EXAMPLES ", "bold white"), ("| ", "dim"), ("WORKSPACE TOOLS ", "bold cyan"), (f"v{version}", "bold yellow"), ("\n ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━\n", "dim blue"))
    console.print(banner)


def cmd_help(console, args=None):
    print_banner(console)
    gen_table = Table(title="[Generation]", box=box.SIMPLE, show_header=False, title_justify="left", title_style="bold green")
    gen_table.add_row("[bold cyan]example <key>     [/]", "[dim]Create a standalone project for one example[/]")
    gen_table.add_row("[bold cyan]category <key>    [/]", "[dim]Create one project holding a whole category[/]")
    gen_table.add_row("[bold cyan]batch <kind>      [/]", "[dim]Create every example or every category project[/]")
    gen_table.add_row("[bold cyan]refresh           [/]", "[dim]Regenerate existing projects in output/ from the template[/]")
    gen_table.add_row("[bold cyan]docs [key]        [/]", "[dim]Generate GitBook pages (--all, --missing)[/]")

    ws_table = Table(title="[Workspace]", box=box.SIMPLE, show_header=False, title_justify="left", title_style="bold cyan")
    ws_table.add_row("[bold cyan]list              [/]", "[dim]Show registered examples by category[/]")
    ws_table.add_row("[bold cyan]discover          [/]", "[dim]Find unregistered examples (--write to register)[/]")
    ws_table.add_row("[bold cyan]check-config      [/]", "[dim]Check categories-config.ts for duplicates[/]")
    ws_table.add_row("[bold cyan]validate [dir]    [/]", "[dim]Install, compile and test generated projects[/]")
    console.print(gen_table); console.print(ws_table)
    return 0


def load_table(root):
    config_file = workspace_config.config_path(root)
    with open(config_file, "r", encoding="utf-8") as f:
        content = f.read()
    result = config_store.validate_config(content)
    config_store.report_validation(result, config_file)
    if not result["valid"]:
        raise config_store.ConfigFormatError(f"{len(result['errors'])} error(s) in {config_file}")
    return config_store.parse_config(content)


def _output_for(root, args, default_name):
    if args.output: return args.output
    return os.path.join(root, workspace_config.OUTPUT_DIR, default_name)


def _run_install(project_dir):
    result = project_runner.install_and_test(project_dir)
    if not result["tests_passed"]:
        print(f"❌ {result['error']}")
        return 1
    print("✅ Compiled and tests passed.")
    return 0


def cmd_example(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    out = example_scaffolder.create_example(root, table, args.key, _output_for(root, args, f"fhevm-example-{args.key}"), args.override)
    return _run_install(out) if args.install else 0


def cmd_category(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    key = config_store.normalize_key(args.key)
    out = example_scaffolder.create_category(root, table, args.key, _output_for(root, args, f"fhevm-examples-{key}"), args.override)
    return _run_install(out) if args.install else 0


def cmd_batch(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    out_root = os.path.join(root, workspace_config.OUTPUT_DIR)
    if args.kind == "examples":
        targets = [(key, f"fhevm-example-{key}", example_scaffolder.create_example) for key, _, _ in example_registry.iter_examples(table)]
    else:
        targets = [(key, f"fhevm-examples-{config_store.normalize_key(key)}", example_scaffolder.create_category) for key in table]
    failed = []
    for key, name, build in targets:
        try:
            build(root, table, key, os.path.join(out_root, name), args.override)
        except (example_scaffolder.ScaffoldError, OSError) as e:
            print(f"  ⚠️  Failed to generate {key}: {e}")
            failed.append(key)
    console.print(Panel.fit(f"Generated {len(targets) - len(failed)} of {len(targets)} {args.kind}", title="Batch", border_style="red" if failed else "green"))
    return 1 if failed else 0


def refresh_target(project):
    """Map a generated project folder to (key, builder)."""
    name = Path(project).name
    if name.startswith("fhevm-examples-"):
        return name[len("fhevm-examples-"):], example_scaffolder.create_category
    return name[len("fhevm-example-"):], example_scaffolder.create_example


def cmd_refresh(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    if args.update_template:
        res = project_runner.run(["git", "submodule", "update", "--init", "--remote", workspace_config.TEMPLATE_DIR], root)
        if res["exit_code"] != 0:
            print(f"  ⚠️  Template update failed: {res['stderr'].strip()}")
    projects = project_runner.find_generated_projects(os.path.join(root, workspace_config.OUTPUT_DIR))
    if not projects:
        console.print("[yellow]! No generated projects to refresh.[/yellow]")
        return 0
    failed = []
    for project in projects:
        key, build = refresh_target(project)
        try:
            build(root, table, key, project, override=True)
        except (example_scaffolder.ScaffoldError, OSError) as e:
            print(f"  ⚠️  Failed to refresh {project.name}: {e}")
            failed.append(project.name)
    console.print(Panel.fit(f"Refreshed {len(projects) - len(failed)} of {len(projects)} projects", title="Refresh", border_style="red" if failed else "green"))
    return 1 if failed else 0


def cmd_docs(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    if args.key:
        example = example_registry.find_example(table, args.key)
        if example is None:
            raise example_scaffolder.ScaffoldError(f"Unknown example '{args.key}'")
        doc_generator.generate_docs(root, example)
        return 0
    result = doc_generator.generate_missing_docs(root, table) if args.missing else doc_generator.generate_all_docs(root, table)
    console.print(Panel.fit(f"Generated {result['generated']} page(s), {len(result['failed'])} failed", title="Docs", border_style="red" if result["failed"] else "green"))
    return 1 if result["failed"] else 0


def cmd_list(console, args):
    table = load_table(workspace_config.PROJECT_ROOT)
    grouped = example_registry.examples_by_category(table)
    out = Table(title="Registered Examples", box=box.ROUNDED, border_style="blue")
    out.add_column("Category", style="cyan"); out.add_column("Example", style="bold"); out.add_column("Contract", style="dim")
    for category, record in table.items():
        if args.category and config_store.normalize_key(category) != config_store.normalize_key(args.category): continue
        for entry in grouped.get(category, []):
            out.add_row(record["name"], entry["key"], entry["item"]["path"])
    console.print(out)
    return 0


def cmd_discover(console, args):
    root = workspace_config.PROJECT_ROOT; table = load_table(root)
    new = example_discovery.find_new_examples(root, table)
    if not new:
        print("✅ No new examples found. All examples are already registered.")
        return 0
    out = Table(title="Unregistered Examples", box=box.ROUNDED, border_style="yellow")
    out.add_column("Category", style="cyan"); out.add_column("Example", style="bold"); out.add_column("Test", style="dim")
    for e in new: out.add_row(e["category"], e["key"], e["item"]["test"])
    console.print(out)
    if args.write:
        example_discovery.register_examples(workspace_config.config_path(root), new)
        print(f"✅ Registered {len(new)} example(s).")
    return 0


def cmd_check_config(console, args):
    load_table(workspace_config.PROJECT_ROOT)
    print("✅ categories-config.ts is valid.")
    return 0


def cmd_validate(console, args):
    target = args.dir or os.path.join(workspace_config.PROJECT_ROOT, workspace_config.OUTPUT_DIR)
    results = project_runner.validate_generated(target)
    if not results:
        console.print(f"[yellow]! No generated projects found in {target}[/yellow]")
        return 1
    out = Table(title="Validation Results", box=box.ROUNDED, border_style="blue")
    out.add_column("Project", style="cyan"); out.add_column("Type"); out.add_column("Compile", justify="center"); out.add_column("Tests", justify="center"); out.add_column("Error", style="dim")
    for r in results:
        out.add_row(r["project"], r["type"], "[bold green]PASS[/]" if r["compiled"] else "[bold red]FAIL[/]",
                    "[bold green]PASS[/]" if r["tests_passed"] else "[bold red]FAIL[/]", r["error"] or "")
    console.print(out)
    return 0 if all(r["tests_passed"] for r in results) else 1


def build_parser():
    parser = argparse.ArgumentParser(description="FHEVM Examples Manager", add_help=False)
    subparsers = parser.add_subparsers(dest="command")

    for name in ("example", "category"):
        p = subparsers.add_parser(name)
        p.add_argument("key"); p.add_argument("--output")
        p.add_argument("--override", action="store_true"); p.add_argument("--install", action="store_true")

    p_batch = subparsers.add_parser("batch")
    p_batch.add_argument("kind", choices=["examples", "categories"]); p_batch.add_argument("--override", action="store_true")

    p_refresh = subparsers.add_parser("refresh")
    p_refresh.add_argument("--update-template", action="store_true")

    p_docs = subparsers.add_parser("docs")
    p_docs.add_argument("key", nargs="?")
    p_docs.add_argument("--all", action="store_true"); p_docs.add_argument("--missing", action="store_true")

    p_list = subparsers.add_parser("list")
    p_list.add_argument("--category")

    p_discover = subparsers.add_parser("discover")
    p_discover.add_argument("--write", action="store_true")

    p_validate = subparsers.add_parser("validate")
    p_validate.add_argument("dir", nargs="?")

    subparsers.add_parser("check-config"); subparsers.add_parser("help")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv); console = Console()
    cmds = {
        "example": cmd_example,
        "category": cmd_category,
        "batch": cmd_batch,
        "refresh": cmd_refresh,
        "docs": cmd_docs,
        "list": cmd_list,
        "discover": cmd_discover,
        "check-config": cmd_check_config,
        "validate": cmd_validate,
        "help": cmd_help,
    }
    handler = cmds.get(args.command, cmd_help)
    try:
        return handler(console, args)
    except FATAL_ERRORS as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__": sys.exit(main())
