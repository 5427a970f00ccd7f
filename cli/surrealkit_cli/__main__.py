"""Entry point for `python -m surrealkit_cli` and the `surrealkit` console script."""

from __future__ import annotations

from surrealkit_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
