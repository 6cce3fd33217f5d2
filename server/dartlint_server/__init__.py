"""
dartlint query server.

FastAPI application exposing the diagnostics of an AnalysisEngine.
"""
