"""
Services that turn a requested path into a download stream.
"""
