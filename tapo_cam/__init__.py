"""Session and secure-transport client for Tapo IP cameras.

Usage:
    >>> from tapo_cam import CameraClient
    >>> client = CameraClient("192.168.1.100", "admin", "secret")
    >>> client.execute("getDeviceInfo", {"device_info": {"name": ["basic_info"]}})
"""

from .camera_client import CameraClient

__all__ = [
    'CameraClient',
]
