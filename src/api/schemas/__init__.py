"""Pydantic schemas for lookup service responses"""
