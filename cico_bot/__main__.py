# cico_bot/__main__.py
"""
Entry point for `python -m cico_bot`.

Delegates to the CLI so both entry points behave the same.
"""

from cico_bot.cli import app

if __name__ == "__main__":
    app()
