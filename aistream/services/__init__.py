"""
Services package for AIStream application.
"""
