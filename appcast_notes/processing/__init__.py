"""
Appcast Notes Processing Module
===============================

Normalization of parsed release fields into display records.
"""
