"""Source fetching: resolve a locator to document text.

Local paths (and ``file:`` URLs) are read from disk. ``http``/``https``
sources are fetched with a timeout and a fixed redirect cap; a redirect
loop or an over-long redirect chain fails the fetch instead of spinning.
"""

import logging
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from kubeimport import __version__
from kubeimport.errors import SourceFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_REDIRECTS = 5


class _BoundedRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Redirect handler with a configurable cap that rejects repeated URLs."""

    max_repeats = 1

    def __init__(self, max_redirects: int) -> None:
        super().__init__()
        self.max_redirections = max_redirects

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        # urllib only counts redirects from the second one on
        if self.max_redirections <= 0:
            raise urllib.error.HTTPError(
                req.full_url, code, f"redirects are disabled ({msg})", headers, fp
            )
        logger.debug("Following %s redirect: %s -> %s", code, req.full_url, newurl)
        return super().redirect_request(req, fp, code, msg, headers, newurl)


class SourceFetcher:
    """Fetches document text from a local path or URL.

    Args:
        timeout: Network timeout in seconds
        max_redirects: Maximum number of redirects followed per fetch
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self.timeout = timeout
        self.max_redirects = max_redirects

    def fetch(self, source: str) -> str:
        """Return the text behind ``source``.

        Raises:
            SourceFetchError: If the source cannot be read
        """
        parsed = urlparse(source)
        scheme = parsed.scheme.lower()

        # single-letter schemes are Windows drive letters
        if scheme in ("", "file") or len(scheme) == 1:
            path = Path(url2pathname(parsed.path)) if scheme == "file" else Path(source)
            return self._read_file(source, path)

        if scheme not in ("http", "https"):
            raise SourceFetchError(source, f"unsupported protocol {scheme}:")

        return self._read_url(source)

    def _read_file(self, source: str, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SourceFetchError(source, "file not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFetchError(source, f"unable to read file ({e})") from e

    def _read_url(self, source: str) -> str:
        opener = urllib.request.build_opener(_BoundedRedirectHandler(self.max_redirects))
        request = urllib.request.Request(
            source,
            method="GET",
            headers={"User-Agent": f"kubeimport/{__version__}"},
        )

        logger.debug("Fetching %s", source)
        try:
            with opener.open(request, timeout=self.timeout) as response:
                if response.status != 200:
                    raise SourceFetchError(source, f"{response.status} {response.reason}")
                body = response.read()
        except urllib.error.HTTPError as e:
            raise SourceFetchError(source, f"{e.code} {e.reason}") from e
        except urllib.error.URLError as e:
            raise SourceFetchError(source, f"unable to reach source ({e.reason})") from e
        except TimeoutError as e:
            raise SourceFetchError(source, f"timed out after {self.timeout}s") from e

        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceFetchError(source, "response is not valid UTF-8") from e
