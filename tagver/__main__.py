"""
Entry point for python -m tagver

Allows running the package as a module:
    python -m tagver
"""

from .cli import main

if __name__ == '__main__':
    main()
