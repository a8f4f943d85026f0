"""readpace - paced daily reading plans for documents."""

__version__ = "0.1.0"
