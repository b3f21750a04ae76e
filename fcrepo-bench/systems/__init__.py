"""
Fedora repository REST clients.
"""
