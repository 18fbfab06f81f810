"""
Serving — FastAPI application exposing search and question answering.
"""
