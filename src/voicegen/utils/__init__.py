"""
Utility Modules for voicegen.

    - text.py: Prompt serialization and voice normalization
    - timeit.py: Stage timing
"""
