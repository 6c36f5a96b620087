"""guildseed: bootstrap populations of progression-tracked agents."""

__version__ = "0.1.0"
