"""
Command-line interface for Rescue Drill.
"""
