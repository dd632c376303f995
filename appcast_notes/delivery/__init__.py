"""
Appcast Notes Delivery Module
=============================

HTML rendering of release records.
"""
