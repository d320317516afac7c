"""
Evaluation layer: inheritance resolution, policy overlay, confidence scoring.
"""
