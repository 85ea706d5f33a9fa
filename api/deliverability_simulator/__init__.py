"""Deliverability Simulator - round resolution engine for the email deliverability game."""

__version__ = "0.1.0"
