"""
Document Compare Tests Package
==============================
Test suite for the structural document comparison engine.
"""
