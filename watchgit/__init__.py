"""Track local git repositories under short aliases."""

__version__ = "0.3.0"
