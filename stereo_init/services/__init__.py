"""
Stereo initialisation services: correspondence search, image loading and orchestration.
"""
