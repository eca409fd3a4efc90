# ibd_genus_tools/cli/__init__.py
"""
Command-line interface modules for ibd_genus_tools.

- run_cli.py: Full pipeline
- columns_cli.py: Genus name extraction for a wide count table
- stats_cli.py: Statistical testing on previously normalized tables
- main_cli.py: Main CLI interface that dispatches to the other modules
"""
