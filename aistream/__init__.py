"""
AIStream: group chat relay with streamed language-model replies.
"""

__version__ = "1.0.0"
