"""
Repository introspection used for informational output.
"""
