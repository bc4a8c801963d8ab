"""Stack release reconciler.

Drives Helm releases on a Kubernetes cluster to match a ``porter.yaml`` stack
manifest and mirrors the result into a relational system-of-record.
"""

__version__ = "0.1.0"
