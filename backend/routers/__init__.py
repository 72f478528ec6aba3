"""
API routers for the Skintelect API.
"""
