"""
HTTP API for fragment generation and puzzle sessions.
"""
