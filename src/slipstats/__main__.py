"""
SlipStats CLI Entry Point

Allows running the package as a module: python -m slipstats
"""

from slipstats.cli import main

if __name__ == "__main__":
    main()
