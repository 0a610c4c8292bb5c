"""
Serving — FastAPI REST surface over document sessions.
"""
