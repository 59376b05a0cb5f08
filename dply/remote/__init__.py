"""Deployment server access."""

from .client import RemoteDeployApi
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .protocol import DeployApi

__all__ = [
    "DeployApi",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "RemoteDeployApi",
]
