"""Retrieve sample metadata from a LIMS service.
"""
