"""
Modal logic playground: an interactive Kripke model editor and MPL checker.
"""

__version__ = '0.1.0'
