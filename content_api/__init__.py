"""Content API backend for the marketing website and admin dashboard."""
