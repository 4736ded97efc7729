"""
Entry point for ``python -m relaunch``.
"""

from relaunch.cli import main

if __name__ == '__main__':
    main()
