"""
Core infrastructure for Kindling: exceptions, logging, paths and settings.
"""
