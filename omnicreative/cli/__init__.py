"""
Command line interface for OmniCreative
"""
