"""
API Middleware - Request/response processing
"""
