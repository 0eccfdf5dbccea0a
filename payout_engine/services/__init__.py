"""
Services.

Business logic of the compensation engine.
"""
