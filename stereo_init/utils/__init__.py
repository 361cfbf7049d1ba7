"""
Utility functions and classes.
"""
