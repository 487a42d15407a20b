"""
Core business logic for class booking.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. The booking rules can be tested in
isolation and the storage backend swapped without touching them.
"""
