"""Location resolution and proximity filtering behind the Discover feed."""

__version__ = "0.1.0"
