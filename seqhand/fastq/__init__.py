"""Classify, stream and trim FASTQ samples.
"""
