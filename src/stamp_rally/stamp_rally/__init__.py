"""Stamp Rally package.

This package is organized by feature modules (stamps, records, statistics)
with a thin Flask controller layer over service/repository layers backed by
an S3 object store.
"""
