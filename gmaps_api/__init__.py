"""
HTTP API for the Google Maps scraper.
"""
