"""
Audio resource components.

    - codes.py: URL -> opaque code derivation
    - cache.py: Process-wide code -> upstream URL map
    - speech.py: Upstream speech generation client
    - upload.py: Upstream file host client and /dl/ rewrite
    - proxy.py: Streaming relay of cached audio
"""
