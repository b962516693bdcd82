"""
Skills Module - Handler registry, plugins, and fallback replies.
"""
