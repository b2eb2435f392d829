"""Module entry point: python -m trackgate ..."""

from trackgate.cli import main


if __name__ == "__main__":
    main()
