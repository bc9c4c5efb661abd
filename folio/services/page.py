"""Server-side composition of a full post page document."""

from bs4 import BeautifulSoup

from folio.models.page_meta import PageMeta
from folio.models.post import Post
from folio.services.posts import reading_time

FEEDBACK_EMAIL = "elijahahianyo@gmail.com"

_SKELETON = (
    "<!DOCTYPE html>"
    '<html lang="en"><head><meta charset="utf-8">'
    '<meta name="viewport" content="width=device-width, initial-scale=1"></head>'
    "<body></body></html>"
)


def _head(soup: BeautifulSoup, meta: PageMeta, site_name: str) -> None:
    head = soup.head
    title = soup.new_tag("title")
    title.string = f"{meta.title} | {site_name}" if site_name else meta.title
    head.append(title)
    head.append(soup.new_tag("link", attrs={"rel": "canonical", "href": meta.canonical_url}))
    for tag in meta.tags:
        head.append(soup.new_tag("meta", attrs={tag.attr: tag.key, "content": tag.content}))


def _feedback(soup: BeautifulSoup):
    box = soup.new_tag("aside", attrs={"class": "post-feedback"})
    text = soup.new_tag("p")
    text.append("Have any concerns with this post? Send me an email at ")
    link = soup.new_tag("a", attrs={"href": f"mailto:{FEEDBACK_EMAIL}"})
    link.string = FEEDBACK_EMAIL
    text.append(link)
    text.append(". I appreciate corrections and thoughtful feedback.")
    box.append(text)
    return box


def render_post_page(post: Post, meta: PageMeta, body_html: str, site_name: str = "") -> str:
    """Return the complete HTML document for *post*.

    *body_html* is the already-rendered markdown body; it is inserted as-is.
    """
    soup = BeautifulSoup(_SKELETON, "lxml")
    _head(soup, meta, site_name)

    article = soup.new_tag("article", attrs={"class": "post"})
    header = soup.new_tag("header")
    heading = soup.new_tag("h1")
    heading.string = post.title
    header.append(heading)

    byline = soup.new_tag("p", attrs={"class": "post-meta"})
    if post.date:
        time = soup.new_tag("time", attrs={"datetime": post.date})
        time.string = post.date
        byline.append(time)
        byline.append(" • ")
    byline.append(reading_time(post.body))
    header.append(byline)
    article.append(header)

    content = soup.new_tag("div", attrs={"class": "prose"})
    fragment = BeautifulSoup(body_html, "html.parser")
    for node in list(fragment.contents):
        content.append(node.extract())
    article.append(content)
    article.append(_feedback(soup))

    soup.body.append(article)
    return str(soup)
