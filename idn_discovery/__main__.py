"""Allows running the package with: python -m idn_discovery"""

from .cli import main

if __name__ == "__main__":
    main()
