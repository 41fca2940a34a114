"""High level code for driving sequence_handling handlers.

This structures processing into the following modules:

  - main.py: Load configuration, set up logging and run a handler.
  - quality_trimming.py: Classify, trim and summarize every sample.
  - config_utils.py: Load YAML configuration and locate programs.
  - datadict.py: Accessors for configuration values.
"""
