"""
Fairway

Golf course booking service with a conversational booking assistant.
"""

__version__ = "0.1.0"
