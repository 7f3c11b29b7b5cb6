"""USD volume, fee and TVL metrics for Cetus pools on Sui"""

__version__ = "1.0.0"
