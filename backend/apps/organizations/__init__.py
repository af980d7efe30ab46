"""
Organizations app - tenant boundary for every gateway request.
"""
