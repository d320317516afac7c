"""
Recipe conversion: ingredient detection, substitution, orchestration.
"""
