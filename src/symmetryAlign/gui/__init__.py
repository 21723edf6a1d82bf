"""PySide6 front-end pieces of SymmetryAlign."""
