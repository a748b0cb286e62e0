"""Package entry point: python -m e2estate ..."""

from __future__ import annotations

from e2estate.cli import main

if __name__ == "__main__":
    main()
