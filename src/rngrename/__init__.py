"""rngrename - rename files to unique, randomly generated names."""

__version__ = "1.0.0"
