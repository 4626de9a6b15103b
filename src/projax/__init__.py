"""Launch project scripts without colliding with services that already hold their ports."""

__version__ = "0.4.0"
