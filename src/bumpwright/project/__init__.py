"""Adapters for the files that record a package's version."""

from __future__ import annotations
