"""
Abstract interfaces for pluggable collaborators
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests


class HTTPTransport(ABC):
    """Abstract interface for sending HTTP requests"""

    @abstractmethod
    def send(
        self, request: requests.PreparedRequest, timeout: Optional[float] = None
    ) -> requests.Response:
        """
        Send a prepared request and return the response

        Args:
            request: Fully prepared request, cookies and headers included
            timeout: Seconds to wait for the remote side before giving up

        Returns:
            The response, whatever its status code

        Raises:
            NetworkError: If the request could not be completed
        """
        pass

    def close(self) -> None:
        """Release any pooled connections"""
        pass
