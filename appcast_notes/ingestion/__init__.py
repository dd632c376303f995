"""
Appcast Notes Ingestion Module
==============================

Feed download and appcast parsing components.
"""
