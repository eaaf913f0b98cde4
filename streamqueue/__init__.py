"""
StreamQueue: a collaborative, vote-ranked video queue service.
"""

__version__ = "0.1.0"
