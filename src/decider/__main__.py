"""Entry point for running decider as a module.

Allows running the CLI with:
    python -m decider
"""

from decider.cli import app

if __name__ == "__main__":
    app()
