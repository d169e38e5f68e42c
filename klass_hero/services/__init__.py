"""
Service layer.

Every public service method returns a ServiceResult; expected business
outcomes arrive as failures carrying an ErrorCode.
"""
