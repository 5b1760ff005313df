"""``python -m demoreel`` runs the typer CLI."""

import sys


def main():
    try:
        from demoreel.cli import main as cli_main
    except ImportError as e:
        print(f"Error: the demoreel CLI needs typer and rich ({e})")
        print("Install with: pip install typer rich")
        sys.exit(1)
    cli_main()


if __name__ == "__main__":
    main()
