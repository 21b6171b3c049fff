"""
Shared helpers used by the estimator, the detection reducer, and the scene.
"""
