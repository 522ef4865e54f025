"""Punch attendance engine.

This package is organized by feature modules (punches, shifts, overtime,
attendance, corrections, ...) with pure computation services on top of
Protocol repositories, and thin MySQL adapters at the persistence boundary.
"""
