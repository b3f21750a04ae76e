"""
Result records, collection and export.
"""
