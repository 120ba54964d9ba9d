"""
bindctl - service binding inspection CLI

Commands:
- bindctl contexts build - Build service contexts for a backing service
- bindctl csv kinds - List kinds a ClusterServiceVersion would add to the watch set
"""

__version__ = "0.1.0"
