"""Newsroom REST API package.

Sub-modules expose FastAPI routers for each domain:
- search: global search and autocomplete suggestions
- catalog: public category and tag listings
"""
