"""Tests for blogsmith.content.enhancements."""

import pytest
from bs4 import BeautifulSoup

from blogsmith.config.models import PostConfig
from blogsmith.content.enhancements import (
    PostEnhancer,
    active_heading_index,
    back_to_top_visible,
    reading_progress,
    slugify,
)

POST_PAGE = """\
<html><body>
<aside class="toc-sidebar"><nav id="toc-nav"></nav></aside>
<span id="reading-time"></span>
<article class="post-content">
  <h2>Intro</h2>
  <p>Some words here.</p>
  <h3 id="custom">Details &amp; Caveats</h3>
  <pre><code>print("hi")</code></pre>
  <h2>Wrap Up</h2>
  <img src="/assets/chart.png" alt="chart">
</article>
</body></html>
"""


def _soup(markup=POST_PAGE):
    return BeautifulSoup(markup, "html.parser")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_slugify(self):
        assert slugify("Hello, World!") == "hello-world"
        assert slugify("Details & Caveats") == "details-caveats"

    def test_reading_progress(self):
        assert reading_progress(0, 2000, 1000) == 0.0
        assert reading_progress(500, 2000, 1000) == pytest.approx(50.0)
        assert reading_progress(5000, 2000, 1000) == 100.0

    def test_reading_progress_short_page(self):
        assert reading_progress(0, 800, 1000) == 0.0
        assert reading_progress(40, 800, 1000) == 0.0
        assert reading_progress(10, 1000, 1000) == 0.0

    def test_active_heading_index(self):
        offsets = [0, 400, 900]
        assert active_heading_index(offsets, 0) == 0
        assert active_heading_index(offsets, 300) == 1
        assert active_heading_index(offsets, 2000) == 2
        assert active_heading_index([500], 0) == -1

    def test_back_to_top(self):
        assert not back_to_top_visible(300)
        assert back_to_top_visible(301)


# ---------------------------------------------------------------------------
# PostEnhancer
# ---------------------------------------------------------------------------


class TestTableOfContents:
    def test_builds_nested_list(self):
        soup = _soup()
        assert PostEnhancer(soup).generate_toc() == 3

        nav = soup.find(id="toc-nav")
        top = nav.find("ul").find_all("li", recursive=False)
        assert len(top) == 2
        nested = top[0].find("ul").find_all("a")
        assert [a.get_text() for a in nested] == ["Details & Caveats"]

        links = nav.select("a.toc-link")
        assert [a["href"] for a in links] == ["#intro-0", "#custom", "#wrap-up-2"]
        assert [a["data-index"] for a in links] == ["0", "1", "2"]
        assert "toc-level-3" in links[1]["class"]

    def test_assigns_heading_ids_and_anchors(self):
        soup = _soup()
        PostEnhancer(soup).generate_toc()
        h2 = soup.select(".post-content h2")
        assert h2[0]["id"] == "intro-0"
        assert h2[0]["data-anchor"] == "#intro-0"
        assert soup.find(id="custom")["data-anchor"] == "#custom"

    def test_hides_sidebar_without_headings(self):
        soup = _soup(
            '<aside class="toc-sidebar"><nav id="toc-nav"></nav></aside>'
            '<div class="post-content"><p>No headings.</p></div>'
        )
        assert PostEnhancer(soup).generate_toc() == 0
        assert soup.select_one(".toc-sidebar")["style"] == "display: none"

    def test_no_nav_is_noop(self):
        soup = _soup('<div class="post-content"><h2>A</h2></div>')
        assert PostEnhancer(soup).generate_toc() == 0
        assert soup.find("h2").get("id") is None

    def test_rebuild_replaces_list(self):
        soup = _soup()
        enhancer = PostEnhancer(soup)
        enhancer.generate_toc()
        enhancer.generate_toc()
        assert len(soup.find(id="toc-nav").find_all("ul", recursive=False)) == 1


class TestReadingTime:
    def test_minimum_one_minute(self):
        soup = _soup()
        assert PostEnhancer(soup).reading_time() == 1
        assert soup.find(id="reading-time").get_text() == "1 min"

    def test_rounds_up(self):
        words = " ".join(["word"] * 450)
        soup = _soup(
            f'<span id="reading-time"></span><div class="post-content"><p>{words}</p></div>'
        )
        assert PostEnhancer(soup).reading_time() == 3

    def test_configured_speed(self):
        words = " ".join(["word"] * 450)
        soup = _soup(
            f'<span id="reading-time"></span><div class="post-content"><p>{words}</p></div>'
        )
        assert PostEnhancer(soup, PostConfig(words_per_minute=100)).reading_time() == 5

    def test_missing_target(self):
        assert PostEnhancer(_soup('<div class="post-content">x</div>')).reading_time() is None


class TestCodeAndImages:
    def test_copy_buttons_idempotent(self):
        soup = _soup()
        enhancer = PostEnhancer(soup)
        assert enhancer.add_copy_code_buttons() == 1
        assert enhancer.add_copy_code_buttons() == 0

        pre = soup.find("pre")
        assert len(pre.select("button.copy-code-btn")) == 1
        assert "position: relative" in pre["style"]

    def test_images_marked_for_lightbox(self):
        soup = _soup()
        assert PostEnhancer(soup).enhance_images() == 1
        img = soup.find("img")
        assert img["data-lightbox"] == "true"
        assert "cursor: zoom-in" in img["style"]

    def test_enhance_runs_everything(self):
        soup = _soup()
        PostEnhancer(soup).enhance()
        assert soup.select("a.toc-link")
        assert soup.find(id="reading-time").get_text() == "1 min"
        assert soup.select_one("button.copy-code-btn") is not None
        assert soup.find("img")["data-lightbox"] == "true"
