"""HTTP client and paginated blog browser for the personal blog API."""

import re
import logging
from typing import Iterator, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

PAGE_SIZE = 4
PREVIEW_LENGTH = 20

# Ordered: block-level markup first, then inline markup
_MARKDOWN_PATTERNS = [
    (re.compile(r"```[^\n]*\n?"), ""),                        # code fences
    (re.compile(r"^\s{0,3}(?:[-*_]\s*){3,}$", re.M), ""),     # horizontal rules
    (re.compile(r"^\s{0,3}#{1,6}\s*", re.M), ""),             # headings
    (re.compile(r"^\s{0,3}>\s?", re.M), ""),                  # blockquotes
    (re.compile(r"^\s*(?:[-*+]|\d+\.)\s+", re.M), ""),        # list markers
    (re.compile(r"<[^>]+>"), ""),                             # html tags
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),           # images
    (re.compile(r"\[([^\]]*)\]\([^)]*\)"), r"\1"),            # links
    (re.compile(r"(\*\*|__)(.+?)\1"), r"\2"),                 # bold
    (re.compile(r"(\*|_)(.+?)\1"), r"\2"),                    # italics
    (re.compile(r"~~(.+?)~~"), r"\1"),                        # strikethrough
    (re.compile(r"`([^`]*)`"), r"\1"),                        # inline code
    (re.compile(r"\n{2,}"), "\n"),
]


def strip_markdown(markdown: str) -> str:
    """Reduce markdown to its plain text."""
    text = markdown or ""
    for pattern, replacement in _MARKDOWN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def truncate_markdown(markdown: str, length: int = PREVIEW_LENGTH) -> str:
    """Plain-text preview of markdown, cut to length characters with an ellipsis."""
    plain_text = strip_markdown(markdown)
    if len(plain_text) > length:
        return plain_text[:length] + "..."
    return plain_text


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class BlogApiClient:
    """
    Thin wrapper over the REST API.

    Any object with the requests.Session call interface can be passed as
    session, which lets tests drive the client through FastAPI's TestClient.
    """

    def __init__(self, base_url: str = "http://localhost:8000", session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = self.session.request(
            method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
        )
        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            logger.warning(f"{method} {path} failed: {response.status_code} {message}")
            raise ApiError(response.status_code, message)
        return response.json()

    def register(self, username: str, email: str, password: str) -> dict:
        return self._request(
            "POST", "/api/auth/register",
            json={"username": username, "email": email, "password": password}
        )

    def login(self, email: str, password: str) -> dict:
        """Log in and keep the token for subsequent protected calls."""
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        self.username = data["username"]
        return data

    def list_blogs(self, page: int = 1, limit: int = PAGE_SIZE, search: Optional[str] = None,
                   category: Optional[str] = None) -> dict:
        params = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if category:
            params["category"] = category
        return self._request("GET", "/api/blogs", params=params)

    def get_blog(self, blog_id: int) -> dict:
        return self._request("GET", f"/api/blogs/{blog_id}")

    def create_blog(self, title: str, content: str, category: Optional[str] = None) -> dict:
        body = {"title": title, "content": content}
        if category is not None:
            body["category"] = category
        return self._request("POST", "/api/blogs/create", json=body)

    def update_blog(self, blog_id: int, **fields) -> dict:
        return self._request("PUT", f"/api/blogs/{blog_id}", json=fields)

    def delete_blog(self, blog_id: int) -> dict:
        return self._request("DELETE", f"/api/blogs/{blog_id}")


class BlogBrowser:
    """
    Client-side state for browsing the blog list a page at a time.

    A search restarts at page 1 and its term stays applied while paging, so
    total_pages always describes the list being shown.
    """

    def __init__(self, client: BlogApiClient, page_size: int = PAGE_SIZE):
        self.client = client
        self.page_size = page_size
        self.page = 1
        self.total_pages = 1
        self.search_term = ""
        self.blogs: List[dict] = []

    def load(self) -> List[dict]:
        """Fetch the current page for the current search term."""
        data = self.client.list_blogs(
            page=self.page, limit=self.page_size, search=self.search_term or None
        )
        self.blogs = data["blogs"]
        self.total_pages = data["totalPages"]
        return self.blogs

    def search(self, term: str) -> List[dict]:
        self.search_term = term.strip()
        self.page = 1
        return self.load()

    @property
    def can_go_previous(self) -> bool:
        return self.page > 1

    @property
    def can_go_next(self) -> bool:
        return self.page < self.total_pages

    def next_page(self) -> List[dict]:
        if self.can_go_next:
            self.page += 1
            self.load()
        return self.blogs

    def previous_page(self) -> List[dict]:
        if self.can_go_previous:
            self.page -= 1
            self.load()
        return self.blogs

    def previews(self, length: int = PREVIEW_LENGTH) -> Iterator[Tuple[int, str, str, str]]:
        """Yield (id, title, preview, author name) for each displayed blog."""
        for blog in self.blogs:
            yield blog["id"], blog["title"], truncate_markdown(blog["content"], length), blog["authorName"]
