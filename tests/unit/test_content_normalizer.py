from datetime import datetime, timedelta, timezone
from pathlib import PurePath

from domain.content import (
    clean_body,
    derive_excerpt,
    derive_featured_image,
    derive_kind,
    derive_published_at,
    derive_slug,
    derive_status,
    derive_title,
    make_excerpt,
    normalize_document,
    slugify,
)
from domain.content.normalizer import MIGRATION_KEY
from domain.schemas import ContentKind, ContentStatus


def test_slugify_folds_accents_and_punctuation() -> None:
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("Café  à Paris") == "cafe-a-paris"
    assert slugify("--Already-Slugged--") == "already-slugged"
    assert slugify("!!!") == ""
    assert slugify(None) == ""


def test_slug_prefers_explicit_value() -> None:
    assert derive_slug({"slug": "custom-slug"}, PurePath("2024-01-15-whatever.md")) == "custom-slug"


def test_slug_from_filename_drops_date_prefix() -> None:
    assert derive_slug({}, PurePath("blog/2024-01-15-Hello World.md")) == "hello-world"
    # blank explicit slug falls through to the filename
    assert derive_slug({"slug": "  "}, PurePath("my_post.mdx")) == "my-post"


def test_slug_never_empty() -> None:
    slug = derive_slug({}, PurePath("blog/!!!.md"))
    assert slug.startswith("untitled-")
    assert len(slug) == len("untitled-") + 8
    # stable for the same path
    assert derive_slug({}, PurePath("blog/!!!.md")) == slug


def test_title_explicit_or_humanized_filename() -> None:
    assert derive_title({"title": "Explicit Title"}, PurePath("x.md")) == "Explicit Title"
    assert derive_title({}, PurePath("2024-01-15-hello_world-again.md")) == "Hello World Again"


def test_status_rules_in_order() -> None:
    assert derive_status({}) is ContentStatus.PUBLISHED
    assert derive_status({"draft": True}) is ContentStatus.DRAFT
    assert derive_status({"status": "Draft"}) is ContentStatus.DRAFT
    assert derive_status({"published": False}) is ContentStatus.DRAFT
    assert derive_status({"status": "archived"}) is ContentStatus.ARCHIVED
    # draft wins over archived
    assert derive_status({"draft": True, "status": "archived"}) is ContentStatus.DRAFT
    # a truthy non-bool draft flag is not a draft
    assert derive_status({"draft": "yes"}) is ContentStatus.PUBLISHED


def test_kind_explicit_then_path() -> None:
    assert derive_kind({"type": "project"}, PurePath("blog/x.md")) is ContentKind.PROJECT
    assert derive_kind({}, PurePath("pages/about.md")) is ContentKind.PAGE
    assert derive_kind({}, PurePath("work/projects/site.md")) is ContentKind.PROJECT
    assert derive_kind({}, PurePath("blog/post.md")) is ContentKind.POST
    # unknown explicit type falls back to path inference
    assert derive_kind({"type": "newsletter"}, PurePath("pages/x.md")) is ContentKind.PAGE


def test_kind_only_looks_below_content_root() -> None:
    item = normalize_document(
        {},
        "Body",
        PurePath("/srv/pages/blog/post.md"),
        relative_to=PurePath("/srv/pages"),
    )
    assert item.kind is ContentKind.POST


def test_published_at_precedence_and_timezone() -> None:
    assert derive_published_at({"date": "2024-01-15"}) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    with_offset = derive_published_at({"date": "2024-01-15T10:00:00+02:00"})
    assert with_offset is not None
    assert with_offset.utcoffset() == timedelta(hours=2)

    # empty date is skipped, boolean `published` is a status flag, not a date
    assert derive_published_at({"date": "", "published": True, "publishedAt": "2024-03-01"}) == datetime(
        2024, 3, 1, tzinfo=timezone.utc
    )


def test_published_at_unparseable_is_none() -> None:
    assert derive_published_at({"date": "not a date at all"}) is None
    assert derive_published_at({"date": 20240115}) is None
    assert derive_published_at({}) is None


def test_clean_body_strips_comments_and_blank_runs() -> None:
    assert clean_body("<!-- note -->\n  Hello  \n\n\n\nWorld\n") == "Hello\n\nWorld"
    assert clean_body("---\nleft: over\n---\nText") == "Text"


def test_excerpt_explicit_then_description_then_body() -> None:
    assert derive_excerpt({"excerpt": "Short."}, "Body") == "Short."
    assert derive_excerpt({"description": "Described."}, "Body") == "Described."
    assert derive_excerpt({}, "# Title\n\nSome **bold** text.") == "Title Some bold text."


def test_excerpt_truncates_on_word_boundary() -> None:
    body = " ".join(["alpha"] * 40)
    excerpt = make_excerpt(body)
    assert excerpt == " ".join(["alpha"] * 26) + "..."
    assert len(excerpt) <= 160 + 3


def test_excerpt_strips_links_code_and_html() -> None:
    body = "See [the docs](https://example.com) and `code`.\n\n```py\nprint(1)\n```\n<b>Done</b>"
    assert make_excerpt(body) == "See the docs and code. Done"


def test_featured_image_mapping() -> None:
    assert derive_featured_image({"image": "./cover.png"}) == "/cover.png"
    assert derive_featured_image({"image": "../img/cover.png"}) == "/img/cover.png"
    assert derive_featured_image({"image": "/static/cover.png"}) == "/static/cover.png"
    assert derive_featured_image({"featured_image": "cover.jpg"}) == "/images/cover.jpg"
    assert derive_featured_image({}) is None


def test_normalize_document_keeps_metadata_and_provenance() -> None:
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    metadata = {"title": "Hello", "tags": ["a", "b"], "metaDescription": "Meta"}
    item = normalize_document(metadata, "Body text", PurePath("content/hello.md"), migrated_at=stamp)

    assert item.slug == "hello"
    assert item.meta_description == "Meta"
    assert item.source_path == str(PurePath("content/hello.md"))
    assert item.original_metadata["tags"] == ["a", "b"]
    assert item.original_metadata[MIGRATION_KEY] == {
        "original_path": str(PurePath("content/hello.md")),
        "migrated_at": stamp.isoformat(),
    }
    # input metadata is not mutated
    assert MIGRATION_KEY not in metadata
