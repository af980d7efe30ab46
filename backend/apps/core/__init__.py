"""
Core app - shared models, logging and request plumbing.
"""
