"""
Entry point for running foxgate as a module: python -m foxgate
"""

from foxgate.cli.commands import main

if __name__ == "__main__":
    main()
