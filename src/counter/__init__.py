"""
Stateless counter endpoint.

- config: host URL and signing secret (env or SSM)
- handler: request handling and the AWS Lambda entry point
"""

__all__ = [
    "config",
    "handler",
]
