"""
API Routes - HTTP endpoint handlers

Routes receive HTTP requests, call services, and return HTTP responses.
"""
