# html_retriever.py
import logging
import os
import threading
import time
from urllib.parse import urlsplit
from urllib.robotparser import RobotFileParser

import requests
from dotenv import load_dotenv

load_dotenv()
USER_AGENT = os.getenv("EBIRD_COMPILER_USER_AGENT", "eBird Compiler")
DEFAULT_CRAWL_DELAY = float(os.getenv("EBIRD_CRAWL_DELAY", "1.0"))
REQUEST_TIMEOUT = float(os.getenv("EBIRD_REQUEST_TIMEOUT", "30"))

logger = logging.getLogger(__name__)


class RetrievalError(RuntimeError):
    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Failed to download {url}: {reason}")


def get_base_url(url: str) -> str:
    """'https://ebird.org/checklist/S1' -> 'https://ebird.org'"""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute URL: '{url}'")
    return f"{parts.scheme}://{parts.netloc}"


class ThrottledSection:
    """Keeps successive accesses at least `min_interval` seconds apart."""

    def __init__(self, min_interval: float = 0.0, clock=time.monotonic, sleep=time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_access = None
        self._lock = threading.Lock()

    def wait(self):
        with self._lock:
            if self._last_access is not None:
                remaining = self._last_access + self.min_interval - self._clock()
                if remaining > 0:
                    logger.debug(f"Throttling for {remaining:.2f}s")
                    self._sleep(remaining)
            self._last_access = self._clock()


def parse_crawl_delay(robots_txt: str, user_agent: str = USER_AGENT) -> float | None:
    parser = RobotFileParser()
    parser.parse(robots_txt.splitlines())
    delay = parser.crawl_delay(user_agent)
    return float(delay) if delay is not None else None


class HTMLRetriever:
    def __init__(self, user_agent: str = USER_AGENT, crawl_delay: float = 0.0,
                 timeout: float = REQUEST_TIMEOUT, session: requests.Session | None = None):
        self.user_agent = user_agent
        self.timeout = timeout
        self.rate_limiter = ThrottledSection(crawl_delay)
        # eBird redirects checklist links through a cookie-setting page,
        # so one session keeps its cookie jar for every request
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Connection": "keep-alive"})

    def set_crawl_delay(self, crawl_delay: float):
        self.rate_limiter.min_interval = crawl_delay

    def get_html(self, url: str) -> str:
        self.rate_limiter.wait()
        logger.info(f"Fetching {url}")
        try:
            res = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            res.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RetrievalError(url, str(e)) from e
        return res.text

    def configure_from_robots(self, url: str, default_delay: float = DEFAULT_CRAWL_DELAY) -> float:
        """Use the site's robots.txt Crawl-delay, falling back to `default_delay`."""
        robots_url = get_base_url(url) + "/robots.txt"
        try:
            robots_txt = self.get_html(robots_url)
        except RetrievalError as e:
            logger.warning(f"{e}; using default crawl delay of {default_delay}s")
            self.set_crawl_delay(default_delay)
            return default_delay

        delay = parse_crawl_delay(robots_txt, self.user_agent)
        if delay is None:
            delay = 0.0
        logger.debug(f"Crawl delay for {robots_url}: {delay}s")
        self.set_crawl_delay(delay)
        return delay

    def close(self):
        self.session.close()
