"""
iecs: interactive shell sessions and live logs for ECS containers.

The operator picks a cluster, service, task and container interactively;
``exec`` then hands the terminal to session-manager-plugin and ``logs``
follows the container's CloudWatch log streams.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
