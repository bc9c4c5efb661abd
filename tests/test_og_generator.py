"""Tests for batch OG card generation and the folio-og entry point."""

import io
import logging
from unittest.mock import AsyncMock, patch

import pytest
from PIL import Image

from folio.config import Settings
from folio.errors import PostsDirectoryNotFound
from folio.og import main
from folio.services.og_generator import generate_all, generate_for_post
from folio.services.page_meta import og_image_url
from folio.services.posts import load_post

_EXPLICIT = "---\ntitle: Explicit\nslug: Custom-Slug\nexcerpt: Has a slug\n---\nBody\n"
_IMPLICIT = "---\ntitle: Implicit\ndescription: Slug from filename\n---\nBody\n"
_MALFORMED = "---\ntitle: [unclosed\n---\nBody\n"


def _fake_png(svg: bytes, width: int = 1200, height: int = 630) -> bytes:
    """Stand-in for CairoSVG: a black PNG of the requested size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "black").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def fake_rasterizer():
    with patch("folio.services.rasterizer.svg_to_png", side_effect=_fake_png) as mocked:
        yield mocked


@pytest.fixture
def posts_dir(tmp_path):
    directory = tmp_path / "posts"
    directory.mkdir()
    (directory / "explicit.md").write_text(_EXPLICIT, encoding="utf-8")
    (directory / "implicit-post.md").write_text(_IMPLICIT, encoding="utf-8")
    (directory / "broken.md").write_text(_MALFORMED, encoding="utf-8")
    (directory / "wip-draft.md").write_text(_IMPLICIT, encoding="utf-8")
    return directory


class TestGenerateForPost:
    def test_explicit_slug_names_the_file(self, posts_dir, tmp_path):
        image = generate_for_post(posts_dir / "explicit.md", tmp_path)
        assert image.path == tmp_path / "Custom-Slug.png"
        assert image.path.exists()

    def test_filename_stem_names_the_file(self, posts_dir, tmp_path):
        image = generate_for_post(posts_dir / "implicit-post.md", tmp_path)
        assert image.path.name == "implicit-post.png"

    def test_output_is_1200_by_630(self, posts_dir, tmp_path):
        image = generate_for_post(posts_dir / "explicit.md", tmp_path)
        with Image.open(image.path) as png:
            assert png.size == (1200, 630)

    def test_file_name_matches_page_metadata(self, posts_dir, tmp_path):
        image = generate_for_post(posts_dir / "explicit.md", tmp_path)
        post = load_post(posts_dir / "explicit.md")
        assert og_image_url("https://ebadf.me", post.slug).endswith("/" + image.path.name)

    def test_background_svg_is_rasterised_then_text_drawn(self, posts_dir, tmp_path, fake_rasterizer):
        image = generate_for_post(posts_dir / "explicit.md", tmp_path)
        svg = fake_rasterizer.call_args.args[0]
        assert b"linearGradient" in svg
        with Image.open(image.path) as png:
            # the card text is white on the black stand-in background
            assert png.convert("L").getextrema()[1] > 0


class TestGenerateAll:
    def test_malformed_post_is_skipped(self, posts_dir, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        out_dir = tmp_path / "public" / "og"
        result = generate_all(posts_dir, out_dir)

        assert sorted(p.name for p in out_dir.iterdir()) == ["Custom-Slug.png", "implicit-post.png"]
        assert len(result.successes) == 2
        assert [(f.filename, f.error_kind) for f in result.failures] == [("broken.md", "PostParseError")]
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "broken.md" in errors[0].getMessage()

    def test_drafts_are_not_generated(self, posts_dir, tmp_path):
        result = generate_all(posts_dir, tmp_path / "og")
        assert "wip-draft.md" not in [s.filename for s in result.successes]
        assert result.attempted == 3

    def test_rerun_is_idempotent(self, posts_dir, tmp_path):
        out_dir = tmp_path / "og"
        first = generate_all(posts_dir, out_dir)
        second = generate_all(posts_dir, out_dir)
        assert [s.path for s in first.successes] == [s.path for s in second.successes]
        assert len(list(out_dir.iterdir())) == 2
        for path in out_dir.iterdir():
            with Image.open(path) as png:
                assert png.size == (1200, 630)

    def test_rasterization_failure_is_isolated(self, posts_dir, tmp_path, fake_rasterizer):
        calls = []

        def flaky(svg, width=1200, height=630):
            calls.append(svg)
            if len(calls) == 1:
                raise RuntimeError("cairo exploded")
            return _fake_png(svg, width, height)

        fake_rasterizer.side_effect = flaky
        result = generate_all(posts_dir, tmp_path / "og")
        assert len(result.successes) == 1
        assert sorted(f.error_kind for f in result.failures) == ["PostParseError", "RuntimeError"]

    def test_path_like_slug_never_writes_outside_out_dir(self, tmp_path):
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "sneaky.md").write_text("---\ntitle: Sneaky\nslug: ../escaped\n---\n", encoding="utf-8")
        out_dir = tmp_path / "site" / "og"

        result = generate_all(posts, out_dir)

        assert result.successes == []
        assert [(f.filename, f.error_kind) for f in result.failures] == [("sneaky.md", "PostParseError")]
        assert not (tmp_path / "site" / "escaped.png").exists()
        assert list(out_dir.iterdir()) == []

    def test_missing_posts_directory_is_fatal(self, tmp_path):
        with pytest.raises(PostsDirectoryNotFound):
            generate_all(tmp_path / "missing", tmp_path / "og")


class TestMain:
    def _run(self, settings):
        with (
            patch("folio.og.configure_logging"),
            patch("folio.og.get_settings", return_value=settings),
            patch("folio.og.load_fonts", new=AsyncMock(return_value=[])) as fonts,
        ):
            code = main()
        return code, fonts

    def test_exit_zero_with_per_file_failures(self, posts_dir, tmp_path):
        out_dir = tmp_path / "og"
        code, fonts = self._run(Settings(posts_dir=posts_dir, og_dir=out_dir))
        assert code == 0
        assert len(list(out_dir.iterdir())) == 2
        fonts.assert_awaited_once()

    def test_missing_directory_exits_non_zero(self, tmp_path):
        code, fonts = self._run(Settings(posts_dir=tmp_path / "missing", og_dir=tmp_path / "og"))
        assert code == 1
        fonts.assert_not_awaited()

    def test_no_posts_exits_non_zero(self, tmp_path):
        empty = tmp_path / "posts"
        empty.mkdir()
        code, _ = self._run(Settings(posts_dir=empty, og_dir=tmp_path / "og"))
        assert code == 1
