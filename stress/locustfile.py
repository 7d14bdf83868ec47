"""Basic Locust profile for mixed shorten/redirect operations.

This profile is convenient for local smoke load against ``python -m shortener``.
It keeps an in-user short-code pool so redirect traffic targets recently
created short URLs, and re-shortens known URLs to exercise the reuse path.

Run::
    locust -f stress/locustfile.py --host http://localhost:8080
"""

import random

from locust import HttpUser, between, task

MAX_CODES_PER_USER = 200


class UrlShortenerUser(HttpUser):
    """Mixed workload user for local functional load checks."""

    wait_time = between(0.1, 0.5)

    def on_start(self) -> None:
        self.codes: list[str] = []
        self.urls: list[str] = []

    @task(2)
    def shorten(self) -> None:
        """Create new short URLs and add successful codes to user cache."""

        url = f"https://example.com/page/{random.randint(1, 1000000)}"
        response = self.client.post("/shorten", json={"url": url}, name="POST /shorten")

        if response.status_code == 200:
            short_url = response.json().get("short_url", "")
            self.codes.append(short_url.rsplit("/", 1)[-1])
            self.urls.append(url)
            if len(self.codes) > MAX_CODES_PER_USER:
                self.codes = self.codes[-MAX_CODES_PER_USER:]
                self.urls = self.urls[-MAX_CODES_PER_USER:]

    @task(1)
    def shorten_existing(self) -> None:
        if not self.urls:
            self.shorten()
            return

        url = random.choice(self.urls)
        self.client.post("/shorten", json={"url": url}, name="POST /shorten (existing)")

    @task(6)
    def redirect(self) -> None:
        """Resolve an existing short code or seed one during warmup."""

        if not self.codes:
            self.shorten()
            return

        short_code = random.choice(self.codes)
        self.client.get(f"/{short_code}", name="GET /:short_code", allow_redirects=False)
