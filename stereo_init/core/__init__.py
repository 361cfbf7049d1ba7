"""
Core geometry of stereo initialisation.
"""
