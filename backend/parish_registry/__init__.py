"""Parish registry backend: members, sacrament registers and contributions."""

__version__ = "0.1.0"
