"""Integrations with external services."""

from .ipdata import OriginClassifier
