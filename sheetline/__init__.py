"""
Spreadsheet-backed timeline editor.

The remote sheet is the source of truth; each load turns its rows into an
immutable view state that the HTML page and the console render.
"""

__version__ = "0.1.0"
