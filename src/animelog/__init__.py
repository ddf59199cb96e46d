"""animelog - personal anime tracker with a rate-limited Jikan gateway."""

__version__ = "0.1.0"
