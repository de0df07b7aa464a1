"""RIFT core: governance, IR, pipeline stages, and the pipeline runner."""
