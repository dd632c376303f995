"""
Appcast Notes View Module
=========================

Host-facing entry point and loading flag.
"""
