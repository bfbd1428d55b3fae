"""ibmpkg — reconcile IBM Installation Manager packages against a manifest."""

__version__ = "0.1.0"
