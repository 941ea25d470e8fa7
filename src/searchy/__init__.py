"""Searchy - web search and page content retrieval through a headless browser."""

__version__ = "0.3.0"
