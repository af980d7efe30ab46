"""
Gateway app - policy core every tenant-facing API route runs through.

Origin guard, tenant resolution, rate limiting and audit logging, wired
together by handler.run_gateway_handler.
"""
