"""All built-in generators, server first."""

from .base import Generator, Trigger
from .server import SERVER_GENERATORS
from .client import CLIENT_GENERATORS

ALL_GENERATORS = SERVER_GENERATORS + CLIENT_GENERATORS

__all__ = [
    "Generator",
    "Trigger",
    "ALL_GENERATORS",
    "SERVER_GENERATORS",
    "CLIENT_GENERATORS",
]
