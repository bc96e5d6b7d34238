"""
Stitchbook REST API (FastAPI)
"""
