"""
CLI Module - Terminal interface over the gap engine.
"""
