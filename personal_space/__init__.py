"""
Backend package for the personal space site.

This package provides a FastAPI application that serves a single profile
record and a feed of text and audio messages stored in a relational
database, with an admin password guarding every mutation.
"""
