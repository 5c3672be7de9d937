"""Image decode/encode and resampling."""
