"""
Command line entry points for the Fedora benchmark.
"""
