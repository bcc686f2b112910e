"""
Spot margin risk kernels.
"""
