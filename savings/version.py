"""Savings calculator version, stamped on every calculated frame."""

VERSION = "1.0.0"
