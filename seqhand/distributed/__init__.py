"""Run samples in parallel on a single machine.
"""
