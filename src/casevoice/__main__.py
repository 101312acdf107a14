"""Entry point for running casevoice as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the casevoice CLI application."""
    app()


if __name__ == "__main__":
    main()
