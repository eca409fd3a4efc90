#!/usr/bin/env python3
"""
Test script to verify imports for key modules in ibd_genus_tools package.

This script attempts to import key modules in the ibd_genus_tools package
and reports which imports succeed and which fail.
"""

import os
import sys
import importlib
import traceback

# Colors for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"
BOLD = "\033[1m"

def attempt_import(module_path):
    """
    Attempt to import a module and return the result.

    Args:
        module_path: The full module path to import

    Returns:
        (success, error_message): Tuple with success flag and error message
    """
    try:
        importlib.import_module(module_path)
        return True, None
    except Exception as e:
        return False, f"{str(e)}\n{traceback.format_exc()}"

def main():
    """Main entry point for the script."""
    print(f"{BOLD}Testing key imports for ibd_genus_tools package{RESET}")
    print("This will attempt to import key modules to verify the import structure is correct.\n")

    # Allow running from a checkout without installing
    sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

    key_modules = [
        "ibd_genus_tools",
        "ibd_genus_tools.logger",
        "ibd_genus_tools.utils.file_utils",
        "ibd_genus_tools.processing.counts",
        "ibd_genus_tools.analysis.statistical",
        "ibd_genus_tools.analysis.reporting",
        "ibd_genus_tools.analysis.visualizations",
        "ibd_genus_tools.core.pipeline",
        "ibd_genus_tools.cli.main_cli",
        "ibd_genus_tools.cli.run_cli",
        "ibd_genus_tools.cli.columns_cli",
        "ibd_genus_tools.cli.stats_cli",
    ]

    success_count = 0
    fail_count = 0

    print(f"{BOLD}Testing individual modules...{RESET}")
    for module_path in key_modules:
        success, error = attempt_import(module_path)
        if success:
            success_count += 1
            print(f"{GREEN}✓ {module_path}{RESET}")
        else:
            fail_count += 1
            print(f"{RED}✗ {module_path}{RESET}")
            print(f"  Error: {error.split(chr(10))[0]}")  # Show only the first line of the error

    total = success_count + fail_count
    success_rate = success_count / total * 100 if total > 0 else 0

    print(f"\n{BOLD}Summary:{RESET}")
    print(f"Total modules tested: {total}")
    print(f"Successful imports: {success_count} ({success_rate:.1f}%)")
    print(f"Failed imports: {fail_count} ({100-success_rate:.1f}%)")

    return 0 if fail_count == 0 else 1

if __name__ == "__main__":
    sys.exit(main())
