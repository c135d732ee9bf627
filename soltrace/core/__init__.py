"""
Core cross-cutting pieces shared by discovery, fetch, decode and trace.
"""
