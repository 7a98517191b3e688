"""Test client for perch applications.

Drives the app through its WSGI interface with ``httpx``. No sockets,
no server process::

    from perch.testing import TestClient

    with TestClient(app) as client:
        response = client.get("/users/7")
        assert response.status_code == 200

Requires ``httpx`` (``pip install perch[testing]``).
"""

from typing import Any

import httpx

from perch.app import App


class TestClient(httpx.Client):
    """``httpx.Client`` bound to a perch ``App``.

    Redirects are not followed, so middleware redirects stay visible to
    assertions.
    """

    __test__ = False  # Tell pytest this is not a test class

    def __init__(self, app: App, *, base_url: str = "http://testserver", **kwargs: Any) -> None:
        self.app = app
        kwargs.setdefault("follow_redirects", False)
        super().__init__(
            transport=httpx.WSGITransport(app=app),
            base_url=base_url,
            **kwargs,
        )
