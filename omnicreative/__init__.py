"""
OmniCreative - AI creative director for copy, research, images and video.
"""

__version__ = "0.1.0"
