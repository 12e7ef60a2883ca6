"""Main entry point for the shelfshare package."""

from shelfshare.rentals.cli import app


def main():
    """Run the shelfshare command-line interface."""
    app()


if __name__ == "__main__":
    main()
