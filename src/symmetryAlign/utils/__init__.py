"""Utility helpers for SymmetryAlign."""
