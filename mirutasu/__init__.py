"""Mirutasu (Otaku Secretary): anime, game dailies and recurring tasks."""

__version__ = "0.1.0"
