"""
Core token resolution engine.

- ir: token value, source and theme models
- registry: source registry and inheritance chains
- resolver: resolution cache and fixed-point engine
- expressions / compute / colors: single-value evaluation
"""
