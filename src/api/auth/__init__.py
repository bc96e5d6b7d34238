"""
Session tokens and request dependencies for the REST API
"""
