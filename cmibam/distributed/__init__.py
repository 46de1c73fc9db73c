"""Hand declared tasks to external execution engines.
"""
