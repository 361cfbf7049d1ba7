"""
Triangulation engine and validity filtering.
"""
