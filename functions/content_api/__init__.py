"""
Content API package for the school website.

Serves hero banners, slideshow slides, lessons and project listings from a
single storage abstraction, either a SQL database or an in-memory fallback,
to a FastAPI server and to the Firebase HTTPS function in ``main.py``.
"""
