"""
Entry point for running prebuildkit as a module.

Usage: python -m prebuildkit
"""

from prebuildkit.cli.main import main

if __name__ == "__main__":
    main()
