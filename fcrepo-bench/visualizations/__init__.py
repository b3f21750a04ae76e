"""
Plots of exported benchmark results.
"""
