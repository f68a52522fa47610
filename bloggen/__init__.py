"""
bloggen - AI-powered CLI for generating SEO-optimized IT job market blog posts.
"""

__version__ = "1.0.0"
