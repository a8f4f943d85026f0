"""Main entry point for the readpace package."""

from readpace.cli import main

if __name__ == "__main__":
    main()
