"""
Streamwright - Kinesis stream reconciliation step for ECS deployment pipelines.

This package provides a broker that converges declared Kinesis streams with
their live AWS state, and a CLI that runs it as one pipeline step.
"""

__version__ = "0.1.0"
__author__ = "Streamwright"
