"""
Accounts app - users acting inside an organization.
"""
