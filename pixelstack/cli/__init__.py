"""
Command groups for the PixelStack CLI.
"""
