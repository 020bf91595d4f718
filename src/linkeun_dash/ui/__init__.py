"""Server-rendered dashboard pages.

Plain HTML forms and redirects; every page reads the request identity that the
session middleware resolved, and every form post goes through an action adapter.
"""
