"""Build-time STRIDE threat modeling for declarative cloud infrastructure."""

__version__ = "0.1.0"
