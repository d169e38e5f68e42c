"""
Core infrastructure: exceptions, logging and HTTP middleware.
"""
