"""ezctl - manage named cluster contexts on a shared kubeasz-style workspace."""

__version__ = "0.1.0"
