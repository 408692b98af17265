"""
Shareable URL projection of the current title id (`?v=<id>`).
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

VIDEO_ID_PARAM = "v"


class URLState:
    def __init__(self, url: str = "") -> None:
        self._url = url
        self._initial_url = url

    @property
    def url(self) -> str:
        return self._url

    def initial_video_id(self) -> str:
        """The id in the URL the session started with; the only automatic lookup trigger."""
        return get_video_id_from_url(self._initial_url)

    def current_video_id(self) -> str:
        return get_video_id_from_url(self._url)

    def set_video_id(self, video_id: str) -> str:
        self._url = set_video_id_in_url(self._url, video_id)
        return self._url


def get_video_id_from_url(url: str) -> str:
    query = urlsplit(url).query
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key == VIDEO_ID_PARAM:
            return value
    return ""


def set_video_id_in_url(url: str, video_id: str) -> str:
    """Set or (for an empty id) remove the `v` parameter, keeping other parameters in order."""
    parts = urlsplit(url)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != VIDEO_ID_PARAM]
    if video_id:
        params.append((VIDEO_ID_PARAM, video_id))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))
