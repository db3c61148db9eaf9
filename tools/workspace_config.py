#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os

# FHEVM Workspace Configuration
# Locates the examples repository and exposes its layout. Every path can be
# overridden from the environment or the repository's .env file.

ROOT_ENV = "FHEVM_EXAMPLES_ROOT"


def resolve_project_root():
    override = os.getenv(ROOT_ENV)
    if override: return os.path.abspath(override)
    current = os.getcwd()
    if os.path.exists(os.path.join(current, "package.json")) or os.path.isdir(os.path.join(current, "contracts")):
        return current
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def load_env(root):
    """Read KEY=VALUE lines from <root>/.env; values already in the environment win."""
    env_path = os.path.join(root, ".env")
    if not os.path.exists(env_path): return False
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip().strip('"').strip("'"))
    return True


PROJECT_ROOT = resolve_project_root()
load_env(PROJECT_ROOT)

CONTRACTS_DIR = os.getenv("FHEVM_CONTRACTS_DIR", "contracts")
TEST_DIR = os.getenv("FHEVM_TEST_DIR", "test")
DOCS_DIR = os.getenv("FHEVM_DOCS_DIR", "docs")
TEMPLATE_DIR = os.getenv("FHEVM_TEMPLATE_DIR", "fhevm-hardhat-template")
OUTPUT_DIR = os.getenv("FHEVM_OUTPUT_DIR", "output")
CATEGORIES_CONFIG = os.getenv("FHEVM_CATEGORIES_CONFIG", os.path.join("scripts", "utils", "categories-config.ts"))
SUMMARY_FILE = os.getenv("FHEVM_SUMMARY_FILE", os.path.join(DOCS_DIR, "SUMMARY.md"))

INSTALL_TIMEOUT = int(os.getenv("FHEVM_INSTALL_TIMEOUT", "120"))
COMPILE_TIMEOUT = int(os.getenv("FHEVM_COMPILE_TIMEOUT", "60"))
TEST_TIMEOUT = int(os.getenv("FHEVM_TEST_TIMEOUT", "120"))


def config_path(root):
    return os.path.join(root, CATEGORIES_CONFIG)


def summary_path(root):
    return os.path.join(root, SUMMARY_FILE)


def read_text(path):
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_text(path, text):
    parent = os.path.dirname(path)
    if parent: os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
