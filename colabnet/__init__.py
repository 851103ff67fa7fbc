"""
colabnet: collaboration networks from git history.

Parses commit logs into a persisted model of which authors change which
files and which files change together, and answers owners and cousins
queries from that snapshot.
"""

__version__ = "1.0.0"
__author__ = "colabnet"
