"""Process boundary for trellis: request schemas and the command-line interface."""
