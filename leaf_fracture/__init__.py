"""
Leaf fracture: cut leaf outlines into torn-looking puzzle fragments.
"""

__version__ = "0.1.0"
