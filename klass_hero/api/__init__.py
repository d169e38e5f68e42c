"""
HTTP layer of the Klass Hero service.
"""
