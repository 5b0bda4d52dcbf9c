"""
Application layer for the progression API.

This package contains:
- ports/: Repository interfaces the services depend on
- exceptions.py: Errors shared by services, infrastructure and routers
"""
