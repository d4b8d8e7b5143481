"""Request controllers for the user directory application."""

from . import registration
