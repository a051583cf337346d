"""
fintrack: session-authenticated income/expense tracking API.
"""

__version__ = "1.0.0"
