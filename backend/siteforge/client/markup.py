"""
Locate and swap single elements inside section HTML.

Elements are addressed by one class token (`hero-section-title`), matched
as a whole word against the `class` attribute.
"""
from html.parser import HTMLParser
from typing import List, Optional, Tuple

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})

ELEMENT_KINDS = {
    "heading": {"h1", "h2", "h3", "h4", "h5", "h6"},
    "image": {"img", "picture", "svg", "figure"},
    "link": {"a"},
    "button": {"button"},
    "text": {"p", "span", "strong", "em", "small", "blockquote", "label"},
    "list": {"ul", "ol", "li"},
    "form": {"form", "input", "textarea", "select"},
    "section": {"section", "header", "footer", "nav", "main", "article", "aside"},
}


def _line_starts(html: str) -> List[int]:
    starts = [0]
    for index, char in enumerate(html):
        if char == "\n":
            starts.append(index + 1)
    return starts


class _ElementLocator(HTMLParser):
    def __init__(self, css_class: str):
        super().__init__()
        self.css_class = css_class
        self.tag = None
        self.depth = 0
        self.start = None
        self.start_text = None
        self.end_tag = None
        self.self_closing = False
        self.done = False

    def _matches(self, attrs) -> bool:
        for name, value in attrs:
            if name == "class" and value and self.css_class in value.split():
                return True
        return False

    def _open(self, tag):
        self.tag = tag
        self.start = self.getpos()
        self.start_text = self.get_starttag_text()

    def handle_starttag(self, tag, attrs):
        if self.done:
            return
        if self.tag is None:
            if self._matches(attrs):
                self._open(tag)
                if tag in VOID_ELEMENTS:
                    self.self_closing = True
                    self.done = True
                else:
                    self.depth = 1
        elif tag == self.tag:
            self.depth += 1

    def handle_startendtag(self, tag, attrs):
        if self.done:
            return
        if self.tag is None and self._matches(attrs):
            self._open(tag)
            self.self_closing = True
            self.done = True

    def handle_endtag(self, tag):
        if self.done or self.tag is None or tag != self.tag:
            return
        self.depth -= 1
        if self.depth == 0:
            self.end_tag = self.getpos()
            self.done = True


def find_element(html: str, css_class: str) -> Optional[Tuple[int, int]]:
    """
    Offsets `(start, end)` of the first element carrying `css_class`, outer
    HTML included, or None when there is no such (closed) element.
    """
    if not html or not css_class:
        return None

    locator = _ElementLocator(css_class)
    locator.feed(html)
    locator.close()

    if locator.start is None or not locator.done:
        return None

    starts = _line_starts(html)
    line, col = locator.start
    start = starts[line - 1] + col

    if locator.self_closing:
        return start, start + len(locator.start_text)

    line, col = locator.end_tag
    end_tag_start = starts[line - 1] + col
    return start, html.index(">", end_tag_start) + 1


def outer_html(html: str, css_class: str) -> Optional[str]:
    span = find_element(html, css_class)
    if span is None:
        return None
    start, end = span
    return html[start:end]


def replace_element(html: str, css_class: str, replacement: str) -> str:
    span = find_element(html, css_class)
    if span is None:
        raise LookupError(f"No element with class '{css_class}'")
    start, end = span
    return html[:start] + replacement + html[end:]


class _TagCollector(HTMLParser):
    def __init__(self):
        super().__init__()
        self.tags = []

    def handle_starttag(self, tag, attrs):
        self.tags.append(tag)


def root_tag(fragment: str) -> Optional[str]:
    collector = _TagCollector()
    collector.feed(fragment or "")
    collector.close()
    return collector.tags[0] if collector.tags else None


def validate_fragment(fragment: Optional[str]) -> str:
    """Edited HTML must be non-empty and contain at least one element."""
    if fragment is None or not fragment.strip():
        raise ValueError("Edited HTML is empty")

    if root_tag(fragment) is None:
        raise ValueError("Edited HTML contains no element")

    return fragment.strip()


def classify(tag: Optional[str]) -> str:
    for kind, tags in ELEMENT_KINDS.items():
        if tag in tags:
            return kind
    return "container"
