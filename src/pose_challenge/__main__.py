"""Module entry point for running the pose challenge as a script."""

from .cli import main


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
