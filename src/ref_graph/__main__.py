"""Entry point for `python -m ref_graph`."""

from .cli import main

if __name__ == "__main__":
    main()
