"""
Dispatch admin console: server-rendered pages over the dispatch backend.
"""
