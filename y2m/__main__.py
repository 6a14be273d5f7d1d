"""
Entry point for ``python -m y2m``.
"""
from .cli import main

if __name__ == "__main__":
    main()
